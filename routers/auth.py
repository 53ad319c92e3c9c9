# routers/auth.py

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from dependencies.auth import get_current_user, CurrentUser
from core.permission_helpers import requires_zone
from core.permissions import get_permissions_for_role
from core.zones import Zone, is_role_allowed_in_zone

router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    role: str
    tenant_id: Optional[str] = None
    permissions: List[str]
    zones: List[str]


# -----------------------------------------------------
# GET /auth/me
# Identity plus what the frontend may show to this user
# -----------------------------------------------------
@router.get(
    "/me",
    response_model=MeResponse,
    dependencies=[Depends(requires_zone(Zone.portal))],
)
def me(current_user: CurrentUser = Depends(get_current_user)):
    return MeResponse(
        id=current_user.id,
        email=current_user.email,
        role=current_user.role,
        tenant_id=current_user.tenant_id,
        permissions=[p.value for p in get_permissions_for_role(current_user.role)],
        zones=[z.value for z in Zone if is_role_allowed_in_zone(current_user.role, z)],
    )
