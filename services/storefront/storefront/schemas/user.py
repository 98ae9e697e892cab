from pydantic import BaseModel, ConfigDict, Field, EmailStr
from datetime import datetime


class UserRegister(BaseModel):
    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=6, description="Password (at least 6 characters)")
    first_name: str = Field(default="", max_length=255, description="First name")
    last_name: str = Field(default="", max_length=255, description="Last name")


class UserLogin(BaseModel):
    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, description="Password")


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    access_token: str = Field(..., description="JWT bearer token")
    token_type: str = Field(default="bearer")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: UserResponse
