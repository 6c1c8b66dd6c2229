# app/db/schemas/auth_schemas.py
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    # Not format-checked: a malformed id card is just another failed login
    id_card: str = Field(..., min_length=1, max_length=32)
    password: str = Field(..., min_length=1, max_length=72)


class LoginResponse(BaseModel):
    id: str = Field(..., description="Patient id")
    user_id: int = Field(..., description="Account id, used for appointments")
    title_name: str
    first_name: str
    last_name: str
