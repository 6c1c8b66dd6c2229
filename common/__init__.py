# common/__init__.py
from .api_error import *
from .config import *
from .context_vars import request_timer_context_var
from .logger import logger, get_app_logger
