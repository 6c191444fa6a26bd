from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from schemas.staff import StaffOut

# Shared properties for authentication requests
class UserBase(BaseModel):
    email: EmailStr

# Schema for email/password sign-in
class UserLogin(UserBase):
    password: str

# Schema for self-service sign-up
class UserCreate(UserBase):
    password: str = Field(min_length=8)
    name: str = Field(min_length=1)
    position: Optional[str] = None
    department: Optional[str] = None

# Schema for requesting a passwordless sign-in link
class MagicLinkRequest(UserBase):
    pass

class MagicLinkVerify(BaseModel):
    token: str

# Schema for changing the caller's password
class PasswordChange(BaseModel):
    current_password: Optional[str] = None
    new_password: str = Field(min_length=8)

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: Optional[str] = None

# Output schema for the signed-in profile
class MeResponse(StaffOut):
    is_admin: bool
