from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from rest_framework import status


VALIDATION_ERROR = "formValidationError"

NOT_FOUND_KEYS = frozenset(
    {
        "notFound",
        "orderNotFound",
        "subDealerNotFound",
        "commissionNotFound",
    }
)
PRECONDITION_KEYS = frozenset(
    {
        "slugExists",
        "hasSubDealers",
        "hasOrders",
        "hasPendingTransactions",
        "noPendingTransactions",
        "belowMinimumPayout",
        "noParentDealer",
        "commissionInactive",
        "commissionAlreadyRecorded",
    }
)


def flatten_errors(serializer_errors) -> dict[str, list[str]]:
    return {
        str(name): [str(message) for message in (messages if isinstance(messages, list) else [messages])]
        for name, messages in serializer_errors.items()
    }


@dataclass(frozen=True, slots=True)
class ServiceResult:
    """Outcome of a dealer-facing mutation.

    Validation failures and unmet preconditions are reported here instead of
    raised; `message_key` is what the dashboard maps to a localized toast.
    """

    success: bool
    message_key: str
    errors: dict[str, list[str]] = field(default_factory=dict)
    instance: Any = None
    commission_amount: Decimal | None = None
    paid_amount: Decimal | None = None

    @classmethod
    def ok(cls, message_key: str, **kwargs) -> "ServiceResult":
        return cls(success=True, message_key=message_key, **kwargs)

    @classmethod
    def fail(cls, message_key: str, **kwargs) -> "ServiceResult":
        return cls(success=False, message_key=message_key, **kwargs)

    @classmethod
    def invalid(cls, serializer_errors) -> "ServiceResult":
        return cls(success=False, message_key=VALIDATION_ERROR, errors=flatten_errors(serializer_errors))

    def http_status(self, *, created: bool = False) -> int:
        if self.success:
            return status.HTTP_201_CREATED if created else status.HTTP_200_OK
        if self.message_key == VALIDATION_ERROR:
            return status.HTTP_400_BAD_REQUEST
        if self.message_key in NOT_FOUND_KEYS:
            return status.HTTP_404_NOT_FOUND
        if self.message_key in PRECONDITION_KEYS:
            return status.HTTP_409_CONFLICT
        return status.HTTP_500_INTERNAL_SERVER_ERROR

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": self.success,
            "message_key": self.message_key,
        }
        if self.errors:
            payload["errors"] = self.errors
        if self.commission_amount is not None:
            payload["commission_amount"] = str(self.commission_amount)
        if self.paid_amount is not None:
            payload["paid_amount"] = str(self.paid_amount)
        return payload
