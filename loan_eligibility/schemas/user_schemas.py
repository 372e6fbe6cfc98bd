# schemas.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from loan_eligibility.schemas.eligibility_schema import CAMEL_CASE_CONFIG


class UserCreate(BaseModel):
    model_config = CAMEL_CASE_CONFIG

    name: str = Field(..., min_length=2, max_length=50, description="Full name of the user")
    email: EmailStr = Field(..., description="Email address of the user")
    phone: Optional[str] = Field(None, description="Contact number of the user")
    password: str = Field(..., min_length=6, description="Password for the user account")

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class UserResponse(BaseModel):
    model_config = CAMEL_CASE_CONFIG

    id: str = Field(..., description="Unique identifier for the user")
    name: str = Field(..., description="Full name of the user")
    email: EmailStr = Field(..., description="Email address of the user")
    phone: Optional[str] = None
    created_at: Optional[datetime] = None

class SignupResponse(BaseModel):
    success: bool = True
    message: str
    user: UserResponse

class Token(BaseModel):
    access_token: str = Field(..., description="Access token for the user")
    token_type: str = Field(default="bearer", description="Type of the token")
    user: Optional[UserResponse] = None
