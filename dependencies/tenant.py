from typing import Optional
from fastapi import Depends, Header, HTTPException, status

from core.cache import KEY_SEPARATOR, WILDCARD
from core.logging_config import logger
from dependencies.auth import get_current_user, CurrentUser
from models.enums import UserRole


TENANT_HEADER = "X-Tenant-Id"


# ============================================================
# TENANT CONTEXT
#
# Regular users are bound to the tenant in their token.
# Platform admins pick one with the X-Tenant-Id header;
# without it they work across tenants (None).
# ============================================================
def get_tenant_context(
    current_user: CurrentUser = Depends(get_current_user),
    x_tenant_id: Optional[str] = Header(None, alias=TENANT_HEADER),
) -> Optional[str]:

    if current_user.role == UserRole.platform_admin:
        tenant_id = (x_tenant_id or "").strip() or None
        if tenant_id is None:
            return None

        if KEY_SEPARATOR in tenant_id or WILDCARD in tenant_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid {TENANT_HEADER} header",
            )

        logger.info(f"Platform admin {current_user.id} acting on tenant {tenant_id}")
        return tenant_id

    if not current_user.tenant_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Tenant context is required for this operation",
        )

    return current_user.tenant_id


# ============================================================
# REQUIRE A SINGLE TENANT (tenant-scoped data)
# ============================================================
def require_tenant_id(
    tenant_id: Optional[str] = Depends(get_tenant_context),
) -> str:
    """
    Tenant the request works on. Only a platform admin without
    the X-Tenant-Id header can get here with no tenant.
    """
    if tenant_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Tenant context required: send the {TENANT_HEADER} header",
        )
    return tenant_id
