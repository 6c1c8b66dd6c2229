# app/api/v1/__init__.py
from .patient_router import patient_router
from .auth_router import auth_router
from .appointment_router import appointment_router
from .reference_router import reference_router

routers = [patient_router, auth_router, appointment_router, reference_router]
