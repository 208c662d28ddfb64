"""
Authentication and user-related Pydantic schemas.

Defines request/response models for tenant registration, login and the
current user.
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, validator
from uuid import UUID


class RegistrationRequest(BaseModel):
    """Tenant and admin registration request schema."""
    email: EmailStr = Field(..., description="Admin email address")
    password: str = Field(..., min_length=8, description="Admin password (minimum 8 characters)")
    display_name: Optional[str] = Field(None, max_length=100, description="Admin display name")
    tenant_name: str = Field(..., min_length=1, max_length=255, description="Name of the new tenant")

    @validator('tenant_name')
    def strip_tenant_name(cls, v):
        """Reject blank tenant names."""
        if not v.strip():
            raise ValueError('tenant_name must not be blank')
        return v.strip()


class LoginRequest(BaseModel):
    """User login request schema."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


class TenantInfo(BaseModel):
    """Tenant information schema."""
    id: UUID = Field(..., description="Tenant ID")
    name: str = Field(..., description="Tenant name")

    class Config:
        from_attributes = True


class UserInfo(BaseModel):
    """User information schema."""
    id: UUID = Field(..., description="User ID")
    tenant_id: UUID = Field(..., description="Tenant ID")
    email: EmailStr = Field(..., description="User email address")
    display_name: Optional[str] = Field(None, description="Display name")
    role: str = Field(..., description="User role")
    active: bool = Field(..., description="Whether user is active")

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    """Authentication response schema."""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: UserInfo = Field(..., description="User information")
    tenant: TenantInfo = Field(..., description="Tenant information")
