# common/api_error/__init__.py
from .ApiError import *
from .config_error import *
