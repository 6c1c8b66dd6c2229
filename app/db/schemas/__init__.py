# app/db/schemas/__init__.py
from .patient_schema import *
from .auth_schemas import *
from .appointment_schemas import *
from .reference_schemas import *
