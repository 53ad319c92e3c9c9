from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# USER ROLE
# -----------------------------------------------------
class UserRole(BaseStrEnum):
    """
    Privilege tiers, declared from least to most privileged.
    Assigned by the identity provider and carried in the JWT.
    """

    tenant = "tenant"                  # Locataire, resident of a lot
    owner = "owner"                    # Propriétaire, owner of one or more lots
    council = "council"                # Conseil syndical member
    manager = "manager"                # Gestionnaire employed by the syndic
    admin = "admin"                    # Admin of the property management company
    platform_admin = "platform_admin"  # Platform operator


# -----------------------------------------------------
# PERMISSION
# -----------------------------------------------------
class Permission(BaseStrEnum):
    """Fine-grained capabilities, namespaced as domain:action."""

    # User management
    user_view = "user:view"
    user_create = "user:create"
    user_update = "user:update"
    user_delete = "user:delete"

    # Condominium management
    condo_view = "condo:view"
    condo_create = "condo:create"
    condo_update = "condo:update"
    condo_delete = "condo:delete"

    # Lot management
    lot_view = "lot:view"
    lot_create = "lot:create"
    lot_update = "lot:update"
    lot_delete = "lot:delete"

    # Financial management
    finance_view = "finance:view"
    finance_create = "finance:create"
    finance_update = "finance:update"
    finance_approve = "finance:approve"
    finance_export = "finance:export"

    # Payments
    payment_view = "payment:view"
    payment_create = "payment:create"
    payment_refund = "payment:refund"

    # Documents
    document_view = "document:view"
    document_upload = "document:upload"
    document_delete = "document:delete"

    # General assembly (AG)
    ag_view = "ag:view"
    ag_create = "ag:create"
    ag_vote = "ag:vote"
    ag_proxy = "ag:proxy"

    # Communication
    message_view = "message:view"
    message_send = "message:send"
    announcement_create = "announcement:create"

    # Reports & analytics
    report_view = "report:view"
    report_export = "report:export"

    # Settings
    settings_view = "settings:view"
    settings_update = "settings:update"

    # Property management companies (platform tenants)
    tenant_view = "tenant:view"
    tenant_create = "tenant:create"
    tenant_update = "tenant:update"
    tenant_suspend = "tenant:suspend"
