# app/services/v1/__init__.py
from .health_metrics import *
from .identity_service import *
from .patient_service import *
from .appointment_service import *
