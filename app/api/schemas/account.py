"""Pydantic schemas for registration and login."""

from pydantic import BaseModel, Field


class AccountCredentials(BaseModel):
    """E-mail/password pair used for both registration and login."""

    email: str = Field(..., min_length=3, max_length=320, examples=["a@x.com"])
    password: str = Field(..., min_length=1, examples=["correct horse battery staple"])


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
