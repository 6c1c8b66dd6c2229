# app/db/models/__init__.py
from .db_base_model import *
from .account_table import *
from .patient_table import *
from .health_data_table import *
from .appointment_table import *
from .password_change_table import *
