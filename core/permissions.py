# core/permissions.py

from enum import Enum
from typing import Iterable, List, Optional, Type, TypeVar

from models.enums import Permission, UserRole

E = TypeVar("E", bound=Enum)


# ============================================
# CENTRALIZED ROLE → PERMISSIONS MAP
# ============================================
ROLE_PERMISSIONS = {

    # =====================================================
    # TENANT (locataire): basic view access
    # =====================================================
    UserRole.tenant: [
        Permission.condo_view,
        Permission.lot_view,
        Permission.document_view,
        Permission.message_view,
        Permission.message_send,
        Permission.ag_view,
        Permission.payment_view,
        Permission.finance_view,  # own finances only
    ],

    # =====================================================
    # OWNER: tenant access plus voting, uploads, payments
    # =====================================================
    UserRole.owner: [
        Permission.condo_view,
        Permission.lot_view,
        Permission.document_view,
        Permission.document_upload,
        Permission.message_view,
        Permission.message_send,
        Permission.ag_view,
        Permission.ag_vote,
        Permission.ag_proxy,
        Permission.payment_view,
        Permission.payment_create,
        Permission.finance_view,
        Permission.report_view,
    ],

    # =====================================================
    # COUNCIL: owner access plus AG creation and approvals
    # =====================================================
    UserRole.council: [
        Permission.condo_view,
        Permission.lot_view,
        Permission.document_view,
        Permission.document_upload,
        Permission.message_view,
        Permission.message_send,
        Permission.ag_view,
        Permission.ag_create,
        Permission.ag_vote,
        Permission.ag_proxy,
        Permission.payment_view,
        Permission.payment_create,
        Permission.finance_view,
        Permission.finance_approve,  # certain operations only
        Permission.report_view,
        Permission.report_export,
        Permission.announcement_create,
    ],

    # =====================================================
    # MANAGER: full management, no deletes on users/condos/lots
    # =====================================================
    UserRole.manager: [
        Permission.user_view, Permission.user_create, Permission.user_update,
        Permission.condo_view, Permission.condo_create, Permission.condo_update,
        Permission.lot_view, Permission.lot_create, Permission.lot_update,
        Permission.document_view, Permission.document_upload, Permission.document_delete,
        Permission.message_view, Permission.message_send,
        Permission.announcement_create,
        Permission.ag_view, Permission.ag_create, Permission.ag_vote, Permission.ag_proxy,
        Permission.payment_view, Permission.payment_create, Permission.payment_refund,
        Permission.finance_view, Permission.finance_create, Permission.finance_update,
        Permission.finance_approve, Permission.finance_export,
        Permission.report_view, Permission.report_export,
        Permission.settings_view,
    ],

    # =====================================================
    # ADMIN: manager access plus deletes and settings
    # =====================================================
    UserRole.admin: [
        Permission.user_view, Permission.user_create, Permission.user_update,
        Permission.user_delete,
        Permission.condo_view, Permission.condo_create, Permission.condo_update,
        Permission.condo_delete,
        Permission.lot_view, Permission.lot_create, Permission.lot_update,
        Permission.lot_delete,
        Permission.document_view, Permission.document_upload, Permission.document_delete,
        Permission.message_view, Permission.message_send,
        Permission.announcement_create,
        Permission.ag_view, Permission.ag_create, Permission.ag_vote, Permission.ag_proxy,
        Permission.payment_view, Permission.payment_create, Permission.payment_refund,
        Permission.finance_view, Permission.finance_create, Permission.finance_update,
        Permission.finance_approve, Permission.finance_export,
        Permission.report_view, Permission.report_export,
        Permission.settings_view, Permission.settings_update,
    ],

    # =====================================================
    # PLATFORM ADMIN: every permission, tenant management included
    # =====================================================
    UserRole.platform_admin: list(Permission),
}


def _coerce(enum_cls: Type[E], value) -> Optional[E]:
    """Map a raw value onto enum_cls, or None when it is not a member."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return None


# -----------------------------------------------------
# Permission evaluation
#
# None of these raise: unknown roles or permissions
# resolve to "no permission".
# -----------------------------------------------------
def has_permission(role, permission) -> bool:
    perm = _coerce(Permission, permission)
    if perm is None:
        return False
    return perm in ROLE_PERMISSIONS.get(_coerce(UserRole, role), [])


def has_all_permissions(role, permissions: Iterable) -> bool:
    # An empty iterable is vacuously satisfied; route guards refuse to
    # declare one (see core.permission_helpers).
    return all(has_permission(role, p) for p in permissions)


def has_any_permission(role, permissions: Iterable) -> bool:
    return any(has_permission(role, p) for p in permissions)


def get_permissions_for_role(role) -> List[Permission]:
    """Return a copy of the role's permissions in declared order."""
    return list(ROLE_PERMISSIONS.get(_coerce(UserRole, role), []))
