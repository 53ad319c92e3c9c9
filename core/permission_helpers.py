from fastapi import APIRouter, Depends, FastAPI, HTTPException
from fastapi.routing import APIRoute
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from dependencies.auth import get_current_user, get_optional_user, CurrentUser
from core.permissions import has_all_permissions, has_any_permission, has_permission
from core.zones import Zone, ZONE_ROLES, is_role_allowed_in_zone
from models.enums import Permission


# -----------------------------------------------------
# Route permission requirement
# -----------------------------------------------------
class PermissionRequirement:
    """
    Permissions a route requires, as an inspectable FastAPI dependency.

    Usage:
        @router.get("/stats", dependencies=[Depends(requires_permissions(Permission.finance_view))])

    `required_permissions` and `match` stay readable after declaration;
    see list_route_permissions().
    """

    def __init__(self, permissions: Iterable, match: str = "all"):
        if match not in ("all", "any"):
            raise ValueError(f"match must be 'all' or 'any', got {match!r}")

        # Unknown permission names fail here, at import time
        self.required_permissions = tuple(Permission(p) for p in permissions)
        if not self.required_permissions:
            raise ValueError(
                "A permission requirement needs at least one permission; "
                "declare public routes with requires_zone(Zone.public)"
            )
        self.match = match

    def is_satisfied_by(self, role) -> bool:
        if self.match == "any":
            return has_any_permission(role, self.required_permissions)
        return has_all_permissions(role, self.required_permissions)

    def __call__(self, current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not self.is_satisfied_by(current_user.role):
            if self.match == "any":
                wanted = ", ".join(f"'{p}'" for p in self.required_permissions)
                detail = f"Insufficient permissions: one of {wanted} required"
            else:
                missing = [p for p in self.required_permissions if not has_permission(current_user.role, p)]
                wanted = ", ".join(f"'{p}'" for p in missing)
                detail = f"Insufficient permissions: {wanted} required"
            raise HTTPException(status_code=403, detail=detail)
        return current_user

    def __repr__(self):
        perms = ", ".join(str(p) for p in self.required_permissions)
        return f"PermissionRequirement([{perms}], match={self.match!r})"


def requires_permissions(*permissions) -> PermissionRequirement:
    """Caller's role must hold every listed permission."""
    return PermissionRequirement(permissions, match="all")


def requires_any_permission(*permissions) -> PermissionRequirement:
    """Caller's role must hold at least one listed permission."""
    return PermissionRequirement(permissions, match="any")


# -----------------------------------------------------
# Zone guard
# -----------------------------------------------------
def requires_zone(zone: Zone):
    """
    Usage:
        router = APIRouter(prefix="/monitoring", dependencies=[Depends(requires_zone(Zone.admin))])

    The public zone needs no token at all.
    """
    zone = Zone(zone)

    if zone == Zone.public:
        def public_zone(
            current_user: Optional[CurrentUser] = Depends(get_optional_user),
        ) -> Optional[CurrentUser]:
            return current_user

        return public_zone

    allowed = ", ".join(ZONE_ROLES[zone])

    def zone_checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not is_role_allowed_in_zone(current_user.role, zone):
            raise HTTPException(
                status_code=403,
                detail=f"Access denied. Zone '{zone}' requires one of: {allowed}",
            )
        return current_user

    return zone_checker


# -----------------------------------------------------
# Introspection
# -----------------------------------------------------
def _collect_requirements(dependant) -> List[PermissionRequirement]:
    found = []
    for sub in dependant.dependencies:
        if isinstance(sub.call, PermissionRequirement):
            found.append(sub.call)
        found.extend(_collect_requirements(sub))
    return found


def register_router(app: FastAPI, router: APIRouter, prefix: str = "", **kwargs):
    """
    Include `router` in `app` and remember it for list_route_permissions().

    Recent FastAPI releases keep included routers as a single entry in
    app.routes instead of copying their routes, so the listing reads
    the registered routers directly.
    """
    app.include_router(router, prefix=prefix, **kwargs)

    if not hasattr(app.state, "routers"):
        app.state.routers = []
    app.state.routers.append((prefix, router))


def _iter_api_routes(app: FastAPI) -> Iterator[Tuple[str, APIRoute]]:
    for route in app.routes:
        if isinstance(route, APIRoute):
            yield route.path, route

    for prefix, router in getattr(app.state, "routers", []):
        for route in router.routes:
            if isinstance(route, APIRoute):
                yield prefix + route.path, route


def list_route_permissions(app: FastAPI) -> Dict[str, List[str]]:
    """
    Map "METHOD /path" to the permissions the route requires,
    for every route guarded by a PermissionRequirement.

    Covers routes declared on the app itself and routers added
    with register_router().
    """
    listing = {}
    for path, route in _iter_api_routes(app):
        requirements = _collect_requirements(route.dependant)
        if not requirements:
            continue

        permissions = []
        for requirement in requirements:
            for permission in requirement.required_permissions:
                if permission.value not in permissions:
                    permissions.append(permission.value)

        for method in sorted(route.methods):
            listing[f"{method} {path}"] = permissions

    return listing
