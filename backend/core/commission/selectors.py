from __future__ import annotations

from datetime import datetime, time
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from django.db.models import Count, DecimalField, Max, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from commission.models import CommissionPayout, CommissionTransaction, DealerCommission
from tenancy.pagination import page_window


ZERO = Decimal("0.00")
MONEY_FIELD = DecimalField(max_digits=14, decimal_places=2)

PAYOUT_INTERVALS = {
    DealerCommission.PayoutFrequency.WEEKLY: relativedelta(weeks=1),
    DealerCommission.PayoutFrequency.MONTHLY: relativedelta(months=1),
}


def _money_sum(**filters):
    return Coalesce(
        Sum("commission_amount", filter=Q(**filters) if filters else None),
        ZERO,
        output_field=MONEY_FIELD,
    )


def _day_start(day):
    return timezone.make_aware(datetime.combine(day, time.min))


def _day_end(day):
    return timezone.make_aware(datetime.combine(day, time.max))


def _transactions_for(parent, *, child_dealer_id=None, status=None, start_date=None, end_date=None):
    queryset = CommissionTransaction.all_objects.filter(parent_dealer=parent)
    if child_dealer_id:
        queryset = queryset.filter(child_dealer_id=child_dealer_id)
    if status:
        queryset = queryset.filter(status=status)
    if start_date is not None:
        queryset = queryset.filter(created_at__gte=_day_start(start_date))
    if end_date is not None:
        queryset = queryset.filter(created_at__lte=_day_end(end_date))
    return queryset


def get_commission_settings(*, parent, child_dealer_id):
    return (
        DealerCommission.all_objects.select_related("child_dealer")
        .filter(parent_dealer=parent, child_dealer_id=child_dealer_id)
        .first()
    )


def get_commissions_by_parent(*, parent):
    return list(
        DealerCommission.all_objects.select_related("child_dealer")
        .filter(parent_dealer=parent)
        .order_by("-created_at", "-id")
    )


def get_commission_transactions(
    *,
    parent,
    child_dealer_id=None,
    status=None,
    start_date=None,
    end_date=None,
    page=1,
    limit=20,
):
    """Accruals owed to `parent`, newest first. Returns `(rows, total)`."""
    queryset = _transactions_for(
        parent,
        child_dealer_id=child_dealer_id,
        status=status,
        start_date=start_date,
        end_date=end_date,
    )
    total = queryset.count()
    offset, limit = page_window(page, limit)
    rows = list(
        queryset.select_related("order", "child_dealer").order_by("-created_at", "-id")[offset : offset + limit]
    )
    return rows, total


def get_commission_report(*, parent, start_date=None, end_date=None) -> dict:
    queryset = _transactions_for(parent, start_date=start_date, end_date=end_date)
    totals = queryset.aggregate(
        total_commission=_money_sum(),
        pending_commission=_money_sum(status=CommissionTransaction.Status.PENDING),
        paid_commission=_money_sum(status=CommissionTransaction.Status.PAID),
        transaction_count=Count("id"),
    )
    rows = list(queryset.select_related("order", "child_dealer").order_by("-created_at", "-id"))
    return {**totals, "transactions": rows}


def next_payout_date(frequency, last_payout_at):
    """Earliest date the next scheduled payout is due; `None` for on-demand."""
    interval = PAYOUT_INTERVALS.get(frequency)
    if interval is None:
        return None
    if last_payout_at is None:
        return timezone.localdate()
    return timezone.localdate(last_payout_at) + interval


def get_pending_payouts(*, parent) -> list[dict]:
    contracts = (
        DealerCommission.all_objects.filter(parent_dealer=parent, is_active=True)
        .select_related("child_dealer")
        .annotate(
            pending_amount=Coalesce(
                Sum(
                    "transactions__commission_amount",
                    filter=Q(transactions__status=CommissionTransaction.Status.PENDING),
                ),
                ZERO,
                output_field=MONEY_FIELD,
            ),
            pending_count=Count(
                "transactions",
                filter=Q(transactions__status=CommissionTransaction.Status.PENDING),
            ),
        )
        .order_by("child_dealer__name", "id")
    )
    last_payouts = dict(
        CommissionPayout.all_objects.filter(parent_dealer=parent)
        .order_by()
        .values("child_dealer_id")
        .annotate(last_paid_at=Max("paid_at"))
        .values_list("child_dealer_id", "last_paid_at")
    )

    rows = []
    for contract in contracts:
        last_paid_at = last_payouts.get(contract.child_dealer_id)
        rows.append(
            {
                "child_dealer_id": contract.child_dealer_id,
                "child_dealer_name": contract.child_dealer.name,
                "pending_amount": contract.pending_amount,
                "transaction_count": contract.pending_count,
                "minimum_payout": contract.minimum_payout,
                "payout_frequency": contract.payout_frequency,
                "can_payout": contract.pending_count > 0 and contract.pending_amount >= contract.minimum_payout,
                "last_payout_at": last_paid_at,
                "next_payout_on": next_payout_date(contract.payout_frequency, last_paid_at),
            }
        )
    return rows


def get_commission_stats(*, parent) -> dict:
    totals = CommissionTransaction.all_objects.filter(parent_dealer=parent).aggregate(
        total_earned=_money_sum(),
        pending_payouts=_money_sum(status=CommissionTransaction.Status.PENDING),
        paid_payouts=_money_sum(status=CommissionTransaction.Status.PAID),
    )
    totals["active_sub_dealers"] = DealerCommission.all_objects.filter(
        parent_dealer=parent,
        is_active=True,
    ).count()
    return totals


def list_payouts(*, parent, child_dealer_id=None):
    queryset = CommissionPayout.all_objects.filter(parent_dealer=parent)
    if child_dealer_id:
        queryset = queryset.filter(child_dealer_id=child_dealer_id)
    return list(queryset.select_related("child_dealer", "processed_by").order_by("-paid_at", "-id"))
