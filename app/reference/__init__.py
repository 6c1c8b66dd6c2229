# app/reference/__init__.py
from .thai_divisions import *
