# app/core/deps.py
from fastapi import Request
from app.reference import ThaiDivisions
from .security import PasswordHasher


def get_password_hasher(request: Request) -> PasswordHasher:
    hasher = getattr(request.app.state, "password_hasher", None)
    if hasher is None:
        raise RuntimeError(
            "PasswordHasher not found in app.state. Ensure lifespan is configured."
        )
    return hasher


def get_thai_divisions(request: Request) -> ThaiDivisions:
    divisions = getattr(request.app.state, "thai_divisions", None)
    if divisions is None:
        raise RuntimeError(
            "Reference divisions not found in app.state. Ensure lifespan is configured."
        )
    return divisions


__all__ = ["get_password_hasher", "get_thai_divisions"]
