# -------------------------
# Enums
# -------------------------
from .enums import (
    BaseStrEnum,
    UserRole,
    Permission,
)

# -------------------------
# Cache Models
# -------------------------
from .cache import CacheStats

# -------------------------
# Dashboard Models
# -------------------------
from .dashboard import DashboardStats
