"""Pydantic schemas for login/signup sync with the external identity provider."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator


class AuthRequest(BaseModel):
    action: Literal["login", "signup"]
    clerk_id: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def signup_requires_names(self) -> "AuthRequest":
        if self.action == "signup":
            missing = [name for name in ("first_name", "last_name") if not getattr(self, name)]
            if missing:
                raise ValueError(f"{', '.join(missing)} required for signup")
        return self


class AuthResponse(BaseModel):
    success: bool = True
    clerk_id: str
    message: str
    timestamp: datetime
