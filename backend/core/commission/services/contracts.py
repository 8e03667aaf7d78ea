from __future__ import annotations

import logging

from django.db import DatabaseError, transaction

from commission.models import CommissionTransaction, DealerCommission
from commission.serializers import CommissionSettingsSerializer
from dealers.models import Dealer
from ledger.models import LedgerEntry
from ledger.services import append_ledger_entry, snapshot
from tenancy.results import ServiceResult


logger = logging.getLogger(__name__)

AUDIT_FIELDS = (
    "child_dealer",
    "order_commission_rate",
    "product_commission_rate",
    "fixed_order_commission",
    "minimum_payout",
    "payout_frequency",
    "is_active",
)


def _contract_for(parent_dealer, child_dealer_id, *, for_update=False):
    queryset = DealerCommission.all_objects.filter(
        parent_dealer=parent_dealer,
        child_dealer_id=child_dealer_id,
    )
    if for_update:
        queryset = queryset.select_for_update()
    return queryset.first()


def _audit(*, parent_dealer, actor, request, action, contract, event_type, before=None, after=None):
    append_ledger_entry(
        dealer=parent_dealer,
        actor=actor,
        action=action,
        event_type=event_type,
        resource_label="commission.dealer_commission",
        resource_pk=contract.pk,
        request=request,
        data_before=before,
        data_after=after,
    )


def create_or_update_commission_settings(
    parent_dealer,
    child_dealer_id,
    data,
    *,
    actor=None,
    request=None,
) -> ServiceResult:
    """Upsert the contract keyed by (parent, child); only own sub-dealers qualify."""

    serializer = CommissionSettingsSerializer(data=data)
    if not serializer.is_valid():
        return ServiceResult.invalid(serializer.errors)
    values = serializer.validated_data

    child = Dealer.objects.filter(pk=child_dealer_id, parent_dealer=parent_dealer).first()
    if child is None:
        return ServiceResult.fail("subDealerNotFound")

    try:
        with transaction.atomic():
            existing = _contract_for(parent_dealer, child.pk, for_update=True)
            before = snapshot(existing, AUDIT_FIELDS) if existing is not None else None
            contract, created = DealerCommission.all_objects.update_or_create(
                parent_dealer=parent_dealer,
                child_dealer=child,
                defaults=dict(values),
            )
            _audit(
                parent_dealer=parent_dealer,
                actor=actor,
                request=request,
                action=LedgerEntry.ACTION_CREATE if created else LedgerEntry.ACTION_UPDATE,
                contract=contract,
                event_type="commission.settings_saved",
                before=before,
                after=snapshot(contract, AUDIT_FIELDS),
            )
    except DatabaseError:
        logger.exception(
            "commission settings save failed",
            extra={"parent_dealer_id": parent_dealer.pk, "child_dealer_id": child.pk},
        )
        return ServiceResult.fail("updateError")

    logger.info(
        "commission settings saved",
        extra={"parent_dealer_id": parent_dealer.pk, "child_dealer_id": child.pk, "contract_created": created},
    )
    return ServiceResult.ok("commissionSettingsUpdated", instance=contract)


def toggle_commission_status(
    parent_dealer,
    child_dealer_id,
    is_active: bool,
    *,
    actor=None,
    request=None,
) -> ServiceResult:
    try:
        with transaction.atomic():
            contract = _contract_for(parent_dealer, child_dealer_id, for_update=True)
            if contract is None:
                return ServiceResult.fail("commissionNotFound")
            before = snapshot(contract, AUDIT_FIELDS)
            contract.is_active = bool(is_active)
            contract.save(update_fields=["is_active", "updated_at"])
            _audit(
                parent_dealer=parent_dealer,
                actor=actor,
                request=request,
                action=LedgerEntry.ACTION_UPDATE,
                contract=contract,
                event_type="commission.status_changed",
                before=before,
                after=snapshot(contract, AUDIT_FIELDS),
            )
    except DatabaseError:
        logger.exception("commission status change failed", extra={"child_dealer_id": child_dealer_id})
        return ServiceResult.fail("updateError")

    key = "commissionActivated" if contract.is_active else "commissionDeactivated"
    return ServiceResult.ok(key, instance=contract)


def delete_commission_settings(parent_dealer, child_dealer_id, *, actor=None, request=None) -> ServiceResult:
    """Delete a contract that has nothing left to pay out.

    Settled accruals and payouts keep their dealer references; only their link
    to the contract is cleared.
    """

    try:
        with transaction.atomic():
            contract = _contract_for(parent_dealer, child_dealer_id, for_update=True)
            if contract is None:
                return ServiceResult.fail("notFound")
            has_pending = CommissionTransaction.all_objects.filter(
                commission=contract,
                status=CommissionTransaction.Status.PENDING,
            ).exists()
            if has_pending:
                logger.warning(
                    "commission delete blocked",
                    extra={"commission_id": contract.pk, "reason": "hasPendingTransactions"},
                )
                return ServiceResult.fail("hasPendingTransactions")

            before = snapshot(contract, AUDIT_FIELDS)
            _audit(
                parent_dealer=parent_dealer,
                actor=actor,
                request=request,
                action=LedgerEntry.ACTION_DELETE,
                contract=contract,
                event_type="commission.settings_deleted",
                before=before,
            )
            contract.delete()
    except DatabaseError:
        logger.exception("commission delete failed", extra={"child_dealer_id": child_dealer_id})
        return ServiceResult.fail("deleteError")

    return ServiceResult.ok("commissionDeleted")
