from pydantic import BaseModel


class DashboardStats(BaseModel):
    late_payments: int = 0
    late_payments_trend: float = 0
    total_unpaid: float = 0
    total_unpaid_trend: float = 0
    failed_direct_debits: int = 0
    failed_direct_debits_trend: float = 0
