# app/core/__init__.py
from .security import PasswordHasher
from .deps import get_password_hasher, get_thai_divisions
