from commission.models.contract import DealerCommission
from commission.models.payout import CommissionPayout
from commission.models.transaction import CommissionTransaction

__all__ = [
    "DealerCommission",
    "CommissionTransaction",
    "CommissionPayout",
]
