from beanie import Document, Indexed
from pydantic import EmailStr, Field
from datetime import datetime
from typing import Optional


class User(Document):
    email: Indexed(EmailStr, unique=True) = Field(..., description="Email address of the user")
    name: str = Field(..., description="Full name of the user")
    phone: Optional[str] = Field(None, description="Contact number of the user")
    # Users created implicitly by an application have no password until they sign up
    hashed_password: Optional[str] = Field(None, description="Hashed password for the user account")
    is_active: bool = Field(default=True, description="Indicates if the user account is active")
    created_at: datetime = Field(default_factory=datetime.now, description="Timestamp when the user was created")
    updated_at: datetime = Field(default_factory=datetime.now, description="Timestamp when the user was last updated")

    class Settings:
        name = "users"
