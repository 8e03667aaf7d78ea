from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from django.db import DatabaseError, IntegrityError, transaction

from commission.models import CommissionTransaction, DealerCommission
from ledger.models import LedgerEntry
from ledger.services import append_ledger_entry
from shop.models import ShopOrder
from tenancy.results import ServiceResult


logger = logging.getLogger(__name__)

_HUNDRED = Decimal("100")
_CENT = Decimal("0.01")
ZERO = Decimal("0.00")


class CommissionError(RuntimeError):
    """Base error for commission computation failures."""


class CommissionRuleError(CommissionError):
    """Raised when contract terms or order amounts are out of range."""


def _to_decimal(value: Any, *, field: str) -> Decimal:
    try:
        if isinstance(value, Decimal):
            return value
        if value is None or value == "":
            raise CommissionRuleError(f"Missing {field}.")
        return Decimal(str(value))
    except (InvalidOperation, TypeError) as exc:
        raise CommissionRuleError(f"Invalid decimal for {field}.") from exc


def round_money(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def compute_order_commission(order_total: Any, order_commission_rate: Any, fixed_order_commission: Any) -> Decimal:
    """`order_total * rate / 100 + fixed`, rounded half-up to cents."""

    total = _to_decimal(order_total, field="order_total")
    rate = _to_decimal(order_commission_rate, field="order_commission_rate")
    fixed = _to_decimal(fixed_order_commission, field="fixed_order_commission")

    if total < 0:
        raise CommissionRuleError("order_total must be >= 0.")
    if not (0 <= rate <= _HUNDRED):
        raise CommissionRuleError("order_commission_rate must be between 0 and 100.")
    if fixed < 0:
        raise CommissionRuleError("fixed_order_commission must be >= 0.")

    return round_money(total * rate / _HUNDRED + fixed)


def _already_recorded(order) -> ServiceResult | None:
    existing = CommissionTransaction.all_objects.filter(order=order).first()
    if existing is None:
        return None
    return ServiceResult.fail(
        "commissionAlreadyRecorded",
        commission_amount=existing.commission_amount,
        instance=existing,
    )


def calculate_order_commission(order_id, *, actor=None, request=None) -> ServiceResult:
    """Accrue the parent dealer's commission for one order placed by a sub-dealer.

    A missing or inactive contract is a no-op (`success=False`,
    nothing written). A zero amount succeeds without writing a row. Each order
    accrues at most once.
    """

    order = (
        ShopOrder.all_objects.select_related("dealer__parent_dealer")
        .filter(pk=order_id)
        .first()
    )
    if order is None:
        return ServiceResult.fail("orderNotFound")

    child = order.dealer
    if not child.is_sub_dealer:
        return ServiceResult.fail("noParentDealer")
    parent = child.parent_dealer

    recorded = _already_recorded(order)
    if recorded is not None:
        return recorded

    contract = DealerCommission.all_objects.filter(parent_dealer=parent, child_dealer=child).first()
    if contract is None:
        return ServiceResult.fail("commissionNotFound")
    if not contract.is_active:
        return ServiceResult.fail("commissionInactive")

    try:
        amount = compute_order_commission(
            order.total,
            contract.order_commission_rate,
            contract.fixed_order_commission,
        )
    except CommissionRuleError:
        logger.exception("commission calculation rejected", extra={"order_id": order.pk, "commission_id": contract.pk})
        return ServiceResult.fail("calculationError")

    if amount <= 0:
        return ServiceResult.ok("commissionCalculated", commission_amount=ZERO)

    try:
        with transaction.atomic():
            accrual = CommissionTransaction.all_objects.create(
                commission=contract,
                parent_dealer=parent,
                child_dealer=child,
                order=order,
                order_total=order.total,
                commission_rate=contract.order_commission_rate,
                fixed_commission=contract.fixed_order_commission,
                commission_amount=amount,
                status=CommissionTransaction.Status.PENDING,
            )
            append_ledger_entry(
                dealer=parent,
                actor=actor,
                action=LedgerEntry.ACTION_CREATE,
                event_type="commission.accrued",
                resource_label="commission.transaction",
                resource_pk=accrual.pk,
                request=request,
                data_after={
                    "order_id": order.pk,
                    "order_number": order.order_number,
                    "child_dealer_id": child.pk,
                    "order_total": order.total,
                    "commission_amount": amount,
                },
            )
    except IntegrityError:
        recorded = _already_recorded(order)
        if recorded is None:
            logger.exception("commission accrual failed", extra={"order_id": order.pk})
            return ServiceResult.fail("calculationError")
        # A concurrent call recorded this order first.
        logger.warning("commission already recorded", extra={"order_id": order.pk})
        return recorded
    except DatabaseError:
        logger.exception("commission accrual failed", extra={"order_id": order.pk})
        return ServiceResult.fail("calculationError")

    logger.info(
        "commission accrued",
        extra={
            "order_id": order.pk,
            "parent_dealer_id": parent.pk,
            "child_dealer_id": child.pk,
            "amount": str(amount),
        },
    )
    return ServiceResult.ok("commissionCalculated", commission_amount=amount, instance=accrual)
