# core/zones.py

"""
Access zones of the API.

1. PUBLIC  (/auth/*, /health/*)   no authentication, no tenant context
2. PORTAL  (owner portal)         owners, tenants, council members and staff
3. MANAGE  (manager workspace)    manager, admin, platform_admin
4. ADMIN   (platform operations)  platform_admin only
"""

from models.enums import BaseStrEnum, UserRole


class Zone(BaseStrEnum):
    public = "public"
    portal = "portal"
    manage = "manage"
    admin = "admin"


# -----------------------------------------------------
# Roles allowed in each zone
# -----------------------------------------------------
ZONE_ROLES = {
    Zone.public: [],  # no authentication needed
    Zone.portal: [
        UserRole.owner,
        UserRole.tenant,
        UserRole.council,
        UserRole.manager,
        UserRole.admin,
        UserRole.platform_admin,
    ],
    Zone.manage: [UserRole.manager, UserRole.admin, UserRole.platform_admin],
    Zone.admin: [UserRole.platform_admin],
}


def is_role_allowed_in_zone(role, zone) -> bool:
    """
    Public zone admits everybody. Otherwise the role must be listed
    for the zone; unknown roles and unknown zones are refused.
    """
    try:
        zone = Zone(zone)
    except (ValueError, TypeError):
        return False

    if zone == Zone.public:
        return True

    return role in ZONE_ROLES[zone]
