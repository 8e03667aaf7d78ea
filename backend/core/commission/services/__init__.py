from commission.services.calculator import (
    CommissionError,
    CommissionRuleError,
    calculate_order_commission,
    compute_order_commission,
    round_money,
)
from commission.services.contracts import (
    create_or_update_commission_settings,
    delete_commission_settings,
    toggle_commission_status,
)
from commission.services.payouts import PayoutConflictError, process_commission_payout

__all__ = [
    "CommissionError",
    "CommissionRuleError",
    "PayoutConflictError",
    "calculate_order_commission",
    "compute_order_commission",
    "round_money",
    "process_commission_payout",
    "create_or_update_commission_settings",
    "toggle_commission_status",
    "delete_commission_settings",
]
