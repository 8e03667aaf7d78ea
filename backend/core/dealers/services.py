from __future__ import annotations

import logging

from django.db import DatabaseError, IntegrityError, transaction

from dealers.models import Dealer
from dealers.selectors import sub_dealer_slug_exists
from dealers.serializers import SubDealerSerializer
from ledger.models import LedgerEntry
from ledger.services import append_ledger_entry, snapshot
from shop.models import ShopOrder
from tenancy.results import ServiceResult


logger = logging.getLogger(__name__)

AUDIT_FIELDS = (
    "name",
    "slug",
    "email",
    "phone",
    "address",
    "logo",
    "parent_dealer",
    "hierarchy_level",
    "inherit_parent_products",
    "can_create_own_products",
    "custom_domain",
    "subdomain",
    "is_active",
)
SLUG_TAKEN_MESSAGE = "This slug is already in use."


def _own_sub_dealer(parent, sub_dealer_id, *, for_update=False):
    queryset = Dealer.objects.filter(pk=sub_dealer_id, parent_dealer=parent)
    if for_update:
        queryset = queryset.select_for_update()
    return queryset.first()


def _domain_conflicts(values, exclude_id=None) -> dict[str, list[str]]:
    errors = {}
    for field_name in ("custom_domain", "subdomain"):
        value = values.get(field_name)
        if not value:
            continue
        queryset = Dealer.all_objects.filter(**{field_name: value})
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        if queryset.exists():
            errors[field_name] = [f"This {field_name.replace('_', ' ')} is already in use."]
    return errors


def _audit(*, parent, actor, request, action, sub_dealer, event_type, before=None):
    append_ledger_entry(
        dealer=parent,
        actor=actor,
        action=action,
        event_type=event_type,
        resource_label="dealers.dealer",
        resource_pk=sub_dealer.pk,
        request=request,
        data_before=before,
        data_after=snapshot(sub_dealer, AUDIT_FIELDS),
    )


def create_sub_dealer(parent: Dealer, data, *, actor=None, request=None) -> ServiceResult:
    serializer = SubDealerSerializer(data=data)
    if not serializer.is_valid():
        return ServiceResult.invalid(serializer.errors)
    values = serializer.validated_data

    if sub_dealer_slug_exists(values["slug"]):
        return ServiceResult.fail("slugExists", errors={"slug": [SLUG_TAKEN_MESSAGE]})
    domain_errors = _domain_conflicts(values)
    if domain_errors:
        return ServiceResult.fail("formValidationError", errors=domain_errors)

    try:
        with transaction.atomic():
            sub_dealer = Dealer(
                parent_dealer=parent,
                is_active=True,
                is_public_page_active=True,
                **values,
            )
            sub_dealer.save()
            _audit(
                parent=parent,
                actor=actor,
                request=request,
                action=LedgerEntry.ACTION_CREATE,
                sub_dealer=sub_dealer,
                event_type="sub_dealer.created",
            )
    except IntegrityError:
        # Lost a race on the unique slug.
        logger.warning("sub-dealer create conflicted", extra={"dealer_id": parent.pk, "slug": values["slug"]})
        return ServiceResult.fail("slugExists", errors={"slug": [SLUG_TAKEN_MESSAGE]})
    except DatabaseError:
        logger.exception("sub-dealer create failed", extra={"dealer_id": parent.pk})
        return ServiceResult.fail("createError")

    logger.info(
        "sub-dealer created",
        extra={"dealer_id": parent.pk, "sub_dealer_id": sub_dealer.pk, "hierarchy_level": sub_dealer.hierarchy_level},
    )
    return ServiceResult.ok("subDealerCreated", instance=sub_dealer)


def update_sub_dealer(
    parent: Dealer,
    sub_dealer_id,
    data,
    *,
    partial: bool = False,
    actor=None,
    request=None,
) -> ServiceResult:
    sub_dealer = _own_sub_dealer(parent, sub_dealer_id)
    if sub_dealer is None:
        return ServiceResult.fail("notFound")

    serializer = SubDealerSerializer(data=data, partial=partial)
    if not serializer.is_valid():
        return ServiceResult.invalid(serializer.errors)
    values = serializer.validated_data

    new_slug = values.get("slug")
    if new_slug and new_slug != sub_dealer.slug and sub_dealer_slug_exists(new_slug, exclude_id=sub_dealer.pk):
        return ServiceResult.fail("slugExists", errors={"slug": [SLUG_TAKEN_MESSAGE]})
    domain_errors = _domain_conflicts(values, exclude_id=sub_dealer.pk)
    if domain_errors:
        return ServiceResult.fail("formValidationError", errors=domain_errors)

    before = snapshot(sub_dealer, AUDIT_FIELDS)
    try:
        with transaction.atomic():
            for field_name, value in values.items():
                setattr(sub_dealer, field_name, value)
            sub_dealer.save(update_fields=[*values.keys(), "updated_at"])
            _audit(
                parent=parent,
                actor=actor,
                request=request,
                action=LedgerEntry.ACTION_UPDATE,
                sub_dealer=sub_dealer,
                event_type="sub_dealer.updated",
                before=before,
            )
    except IntegrityError:
        logger.warning("sub-dealer update conflicted", extra={"dealer_id": parent.pk, "sub_dealer_id": sub_dealer.pk})
        return ServiceResult.fail("slugExists", errors={"slug": [SLUG_TAKEN_MESSAGE]})
    except DatabaseError:
        logger.exception("sub-dealer update failed", extra={"dealer_id": parent.pk, "sub_dealer_id": sub_dealer.pk})
        return ServiceResult.fail("updateError")

    logger.info("sub-dealer updated", extra={"dealer_id": parent.pk, "sub_dealer_id": sub_dealer.pk})
    return ServiceResult.ok("subDealerUpdated", instance=sub_dealer)


def delete_sub_dealer(parent: Dealer, sub_dealer_id, *, actor=None, request=None) -> ServiceResult:
    """Remove a childless, orderless sub-dealer.

    The row is tombstoned rather than dropped so that contracts, commission
    history and audit entries that point at it stay resolvable.
    """
    try:
        with transaction.atomic():
            sub_dealer = _own_sub_dealer(parent, sub_dealer_id, for_update=True)
            if sub_dealer is None:
                return ServiceResult.fail("notFound")
            if Dealer.objects.filter(parent_dealer=sub_dealer).exists():
                logger.warning(
                    "sub-dealer delete blocked",
                    extra={"dealer_id": parent.pk, "sub_dealer_id": sub_dealer.pk, "reason": "hasSubDealers"},
                )
                return ServiceResult.fail("hasSubDealers")
            if ShopOrder.all_objects.filter(dealer=sub_dealer).exists():
                logger.warning(
                    "sub-dealer delete blocked",
                    extra={"dealer_id": parent.pk, "sub_dealer_id": sub_dealer.pk, "reason": "hasOrders"},
                )
                return ServiceResult.fail("hasOrders")

            before = snapshot(sub_dealer, AUDIT_FIELDS)
            sub_dealer.tombstone()
            _audit(
                parent=parent,
                actor=actor,
                request=request,
                action=LedgerEntry.ACTION_DELETE,
                sub_dealer=sub_dealer,
                event_type="sub_dealer.deleted",
                before=before,
            )
    except DatabaseError:
        logger.exception("sub-dealer delete failed", extra={"dealer_id": parent.pk, "sub_dealer_id": sub_dealer_id})
        return ServiceResult.fail("deleteError")

    logger.info("sub-dealer deleted", extra={"dealer_id": parent.pk, "sub_dealer_id": sub_dealer.pk})
    return ServiceResult.ok("subDealerDeleted")


def _set_flag(parent, sub_dealer_id, *, field_name, value, event_type, actor, request):
    sub_dealer = _own_sub_dealer(parent, sub_dealer_id)
    if sub_dealer is None:
        return None, ServiceResult.fail("notFound")

    before = snapshot(sub_dealer, AUDIT_FIELDS)
    try:
        with transaction.atomic():
            setattr(sub_dealer, field_name, value)
            sub_dealer.save(update_fields=[field_name, "updated_at"])
            _audit(
                parent=parent,
                actor=actor,
                request=request,
                action=LedgerEntry.ACTION_UPDATE,
                sub_dealer=sub_dealer,
                event_type=event_type,
                before=before,
            )
    except DatabaseError:
        logger.exception(
            "sub-dealer flag update failed",
            extra={"dealer_id": parent.pk, "sub_dealer_id": sub_dealer.pk, "field": field_name},
        )
        return sub_dealer, ServiceResult.fail("updateError")
    return sub_dealer, None


def toggle_sub_dealer_status(
    parent: Dealer, sub_dealer_id, is_active: bool, *, actor=None, request=None
) -> ServiceResult:
    sub_dealer, failure = _set_flag(
        parent,
        sub_dealer_id,
        field_name="is_active",
        value=bool(is_active),
        event_type="sub_dealer.status_changed",
        actor=actor,
        request=request,
    )
    if failure is not None:
        return failure
    logger.info(
        "sub-dealer status changed",
        extra={"dealer_id": parent.pk, "sub_dealer_id": sub_dealer.pk, "is_active": sub_dealer.is_active},
    )
    key = "subDealerActivated" if sub_dealer.is_active else "subDealerDeactivated"
    return ServiceResult.ok(key, instance=sub_dealer)


def update_product_inheritance(
    parent: Dealer, sub_dealer_id, inherit_parent_products: bool, *, actor=None, request=None
) -> ServiceResult:
    sub_dealer, failure = _set_flag(
        parent,
        sub_dealer_id,
        field_name="inherit_parent_products",
        value=bool(inherit_parent_products),
        event_type="sub_dealer.inheritance_changed",
        actor=actor,
        request=request,
    )
    if failure is not None:
        return failure
    return ServiceResult.ok("inheritanceUpdated", instance=sub_dealer)
