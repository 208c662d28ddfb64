"""
Authentication dependencies for FastAPI endpoints.

Provides dependency functions for extracting user information and the
tenant-scoped data access every business endpoint works through.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..database.connection import get_db
from ..database.models import Tenant
from ..services.errors import Unauthenticated
from ..services.tenant_scope import TenantScope
from .jwt_handler import TokenClaims, decode_access_token

security = HTTPBearer()


# PUBLIC_INTERFACE
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> TokenClaims:
    """
    Get current authenticated user from JWT token.

    The tenant id may be absent; endpoints that need a tenant reject such
    callers through ``get_tenant_scope``.

    Raises:
        HTTPException: If token is invalid
    """
    claims = decode_access_token(credentials.credentials)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims


# PUBLIC_INTERFACE
async def get_tenant_context(
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Tenant:
    """
    Resolve the caller's active tenant.

    Raises:
        Unauthenticated: If the token carries no tenant or the tenant is gone
    """
    if current_user.tenant_id is None:
        raise Unauthenticated("Token does not identify a tenant")

    tenant = db.query(Tenant).filter(Tenant.id == current_user.tenant_id, Tenant.active == True).first()
    if not tenant:
        raise Unauthenticated("Tenant not found or inactive")

    return tenant


# PUBLIC_INTERFACE
async def get_tenant_scope(
    tenant: Tenant = Depends(get_tenant_context),
    db: Session = Depends(get_db)
) -> TenantScope:
    """
    Get tenant-scoped data access for the request.

    Args:
        tenant: Current tenant context
        db: Database session

    Returns:
        TenantScope: Session wrapper confined to the tenant
    """
    return TenantScope(db, tenant.id)
