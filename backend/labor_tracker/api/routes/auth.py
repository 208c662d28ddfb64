"""
Authentication API routes.

Provides endpoints for tenant registration, login and the current user.
"""
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...database.connection import get_db
from ...database.models import User, Tenant, UserRole
from ...schemas.auth import (
    RegistrationRequest, LoginRequest, AuthResponse, UserInfo, TenantInfo
)
from ...auth.dependencies import get_current_user
from ...auth.jwt_handler import TokenClaims, hash_password, issue_access_token, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(user: User, tenant: Tenant) -> AuthResponse:
    access_token = issue_access_token(
        user.id, tenant.id, user.email, user.role.value
    )
    return AuthResponse(
        access_token=access_token,
        user=UserInfo(
            id=user.id,
            tenant_id=user.tenant_id,
            email=user.email,
            display_name=user.display_name,
            role=user.role.value,
            active=user.active
        ),
        tenant=TenantInfo.model_validate(tenant)
    )


# PUBLIC_INTERFACE
@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED,
            summary="Register new tenant",
            description="Create a tenant together with its first admin user.")
async def register(
    request: RegistrationRequest,
    db: Session = Depends(get_db)
):
    """
    Register a new tenant and its admin user.

    Returns an access token for the new admin.
    """
    if db.query(User).filter(User.email == request.email).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists"
        )

    if db.query(Tenant).filter(Tenant.name == request.tenant_name).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Tenant with this name already exists"
        )

    tenant = Tenant(name=request.tenant_name)
    db.add(tenant)
    db.flush()

    user = User(
        tenant_id=tenant.id,
        email=request.email,
        password_hash=hash_password(request.password),
        display_name=request.display_name,
        role=UserRole.ADMIN  # First user is admin
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    db.refresh(tenant)

    logger.info(f"Registered tenant {tenant.id} with admin {user.email}")
    return _auth_response(user, tenant)


# PUBLIC_INTERFACE
@router.post("/login", response_model=AuthResponse,
            summary="User login",
            description="Authenticate with email and password and receive an access token.")
async def login(
    request: LoginRequest,
    db: Session = Depends(get_db)
):
    """Authenticate user and return an access token."""
    user = db.query(User).filter(User.email == request.email, User.active == True).first()
    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    tenant = db.query(Tenant).filter(Tenant.id == user.tenant_id, Tenant.active == True).first()
    if not tenant:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User's tenant is not active"
        )

    user.last_login = datetime.now(timezone.utc)
    db.commit()

    return _auth_response(user, tenant)


# PUBLIC_INTERFACE
@router.get("/me", response_model=UserInfo,
           summary="Current user",
           description="Get information about the authenticated user.")
async def me(
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Return the authenticated user's profile."""
    user = db.query(User).filter(User.id == current_user.user_id, User.active == True).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return UserInfo(
        id=user.id,
        tenant_id=user.tenant_id,
        email=user.email,
        display_name=user.display_name,
        role=user.role.value,
        active=user.active
    )
