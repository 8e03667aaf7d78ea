from __future__ import annotations

import logging
from decimal import Decimal

from django.db import DatabaseError, transaction
from django.utils import timezone

from commission.models import CommissionPayout, CommissionTransaction, DealerCommission
from commission.services.calculator import CommissionError
from ledger.models import LedgerEntry
from ledger.services import append_ledger_entry
from tenancy.results import ServiceResult


logger = logging.getLogger(__name__)


class PayoutConflictError(CommissionError):
    """Locked pending rows changed before they could be marked paid."""


def process_commission_payout(
    parent_dealer,
    child_dealer_id,
    *,
    processed_by=None,
    request=None,
) -> ServiceResult:
    """Settle every pending accrual of one contract in a single transaction.

    The contract row and its pending accruals are locked, summed and flipped to
    PAID by primary key, so an accrual inserted meanwhile is left for the next
    payout instead of being paid without being counted.
    """

    try:
        with transaction.atomic():
            contract = (
                DealerCommission.all_objects.select_for_update()
                .filter(parent_dealer=parent_dealer, child_dealer_id=child_dealer_id)
                .first()
            )
            if contract is None:
                return ServiceResult.fail("commissionNotFound")

            pending = list(
                CommissionTransaction.all_objects.select_for_update()
                .filter(commission=contract, status=CommissionTransaction.Status.PENDING)
                .order_by("id")
                .values_list("pk", "commission_amount")
            )
            if not pending:
                return ServiceResult.fail("noPendingTransactions")

            pending_ids = [pk for pk, _amount in pending]
            total = sum((amount for _pk, amount in pending), Decimal("0.00"))
            if total < contract.minimum_payout:
                logger.warning(
                    "payout below minimum",
                    extra={
                        "commission_id": contract.pk,
                        "pending_amount": str(total),
                        "minimum_payout": str(contract.minimum_payout),
                    },
                )
                return ServiceResult.fail("belowMinimumPayout")

            paid_at = timezone.now()
            payout = CommissionPayout.all_objects.create(
                commission=contract,
                parent_dealer_id=contract.parent_dealer_id,
                child_dealer_id=contract.child_dealer_id,
                total_amount=total,
                transaction_count=len(pending_ids),
                paid_at=paid_at,
                processed_by=processed_by if getattr(processed_by, "is_authenticated", False) else None,
            )
            updated = CommissionTransaction.all_objects.filter(
                pk__in=pending_ids,
                status=CommissionTransaction.Status.PENDING,
            ).update(
                status=CommissionTransaction.Status.PAID,
                paid_at=paid_at,
                payout=payout,
            )
            if updated != len(pending_ids):
                raise PayoutConflictError(
                    f"Expected to settle {len(pending_ids)} accruals, settled {updated}."
                )

            append_ledger_entry(
                dealer=parent_dealer,
                actor=processed_by,
                action=LedgerEntry.ACTION_UPDATE,
                event_type="commission.payout_processed",
                resource_label="commission.payout",
                resource_pk=payout.pk,
                request=request,
                data_after={
                    "commission_id": contract.pk,
                    "child_dealer_id": contract.child_dealer_id,
                    "total_amount": total,
                    "transaction_ids": pending_ids,
                },
            )
    except PayoutConflictError:
        logger.exception("payout aborted", extra={"child_dealer_id": child_dealer_id})
        return ServiceResult.fail("payoutError")
    except DatabaseError:
        logger.exception("payout failed", extra={"child_dealer_id": child_dealer_id})
        return ServiceResult.fail("payoutError")

    logger.info(
        "payout processed",
        extra={
            "parent_dealer_id": parent_dealer.pk,
            "child_dealer_id": contract.child_dealer_id,
            "amount": str(total),
            "transactions": len(pending_ids),
        },
    )
    return ServiceResult.ok("payoutProcessed", paid_amount=total, instance=payout)
