from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID, uuid4

from django.db import IntegrityError, transaction
from django.utils import timezone

from ledger.models import LedgerEntry


logger = logging.getLogger(__name__)

CHAIN_APPEND_ATTEMPTS = 5
PLATFORM_CHAIN_ID = "platform"


class LedgerChainError(RuntimeError):
    pass


@dataclass(frozen=True)
class RequestFingerprint:
    request_id: UUID
    method: str = ""
    path: str = ""
    ip_address: str = ""

    @classmethod
    def from_request(cls, request) -> "RequestFingerprint":
        if request is None:
            return cls(request_id=uuid4())
        correlation_id = getattr(request, "correlation_id", "") or request.headers.get(
            "X-Correlation-ID", ""
        )
        return cls(
            request_id=_parse_uuid(correlation_id) or uuid4(),
            method=(getattr(request, "method", "") or "").upper(),
            path=(getattr(request, "path", "") or "")[:255],
            ip_address=_client_ip(request),
        )


def _parse_uuid(value) -> UUID | None:
    if not value:
        return None
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


def _client_ip(request) -> str:
    # Only the left-most hop of X-Forwarded-For is the client.
    forwarded_for = (request.META.get("HTTP_X_FORWARDED_FOR") or "").strip()
    if forwarded_for:
        return forwarded_for.split(",", 1)[0].strip()
    return (request.META.get("REMOTE_ADDR") or "").strip()


def canonical_json(value) -> str:
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
        default=str,
    )


def _plain(value):
    return json.loads(canonical_json(value)) if value is not None else None


def chain_id_for(dealer) -> str:
    return f"dealer:{dealer.id}" if dealer is not None else PLATFORM_CHAIN_ID


def compute_entry_hash(payload: dict, prev_hash: str) -> str:
    material = f"{prev_hash}{canonical_json(payload)}".encode("utf-8")
    return hashlib.sha256(material).hexdigest()


def _hash_payload(entry: LedgerEntry) -> dict:
    return {
        "chain_id": entry.chain_id,
        "scope": entry.scope,
        "dealer_id": entry.dealer_id,
        "actor_username": entry.actor_username,
        "action": entry.action,
        "event_type": entry.event_type,
        "resource_label": entry.resource_label,
        "resource_pk": entry.resource_pk,
        "occurred_at": entry.occurred_at.isoformat(),
        "request_id": str(entry.request_id),
        "request_method": entry.request_method,
        "request_path": entry.request_path,
        "ip_address": entry.ip_address or "",
        "data_before": entry.data_before,
        "data_after": entry.data_after,
        "metadata": entry.metadata,
    }


def snapshot(instance, fields) -> dict:
    """Plain-JSON view of selected model fields for `data_before`/`data_after`."""
    data = {}
    for name in fields:
        value = getattr(instance, name)
        if hasattr(value, "pk"):
            value = value.pk
        elif isinstance(value, Decimal):
            value = str(value)
        data[name] = value
    return _plain(data)


def append_ledger_entry(
    *,
    dealer,
    actor,
    action: str,
    resource_label: str,
    resource_pk,
    request=None,
    event_type: str = "",
    data_before: dict | None = None,
    data_after: dict | None = None,
    metadata: dict | None = None,
) -> LedgerEntry:
    """Append an immutable entry to the dealer's chain (or the platform chain
    when `dealer` is None).

    Concurrent writers collide on the (chain_id, prev_hash) unique constraint;
    the loser re-reads the chain head and retries.
    """

    if action not in dict(LedgerEntry.ACTION_CHOICES):
        raise ValueError(f"Invalid ledger action '{action}'.")

    scope = LedgerEntry.SCOPE_DEALER if dealer is not None else LedgerEntry.SCOPE_PLATFORM
    chain_id = chain_id_for(dealer)
    fingerprint = RequestFingerprint.from_request(request)
    actor_obj = actor if getattr(actor, "is_authenticated", False) else None

    for _attempt in range(CHAIN_APPEND_ATTEMPTS):
        prev_hash = LedgerEntry.all_objects.head_hash(chain_id)
        entry = LedgerEntry(
            scope=scope,
            dealer=dealer,
            actor=actor_obj,
            actor_username=(getattr(actor_obj, "username", "") or "").strip(),
            action=action,
            event_type=event_type or f"{resource_label}.{action.lower()}",
            resource_label=resource_label,
            resource_pk=str(resource_pk or ""),
            occurred_at=timezone.now(),
            request_id=fingerprint.request_id,
            request_method=fingerprint.method,
            request_path=fingerprint.path,
            ip_address=fingerprint.ip_address or None,
            chain_id=chain_id,
            prev_hash=prev_hash,
            data_before=_plain(data_before),
            data_after=_plain(data_after),
            metadata=_plain(metadata) if isinstance(metadata, dict) else {},
        )
        entry.entry_hash = compute_entry_hash(_hash_payload(entry), prev_hash)

        try:
            with transaction.atomic():
                entry.save(force_insert=True)
            return entry
        except IntegrityError as exc:
            if "uq_ledger_prev_hash_per_chain" in str(exc) or "prev_hash" in str(exc):
                logger.info("ledger chain head moved, retrying", extra={"chain_id": chain_id})
                continue
            raise

    raise LedgerChainError(f"Could not append to ledger chain '{chain_id}'.")


def verify_chain(chain_id: str) -> list[int]:
    """Return ids of entries whose link or hash does not match. Empty means intact."""
    broken: list[int] = []
    expected_prev = ""
    for entry in LedgerEntry.all_objects.chain(chain_id).iterator():
        recomputed = compute_entry_hash(_hash_payload(entry), entry.prev_hash)
        if entry.prev_hash != expected_prev or recomputed != entry.entry_hash:
            broken.append(entry.id)
        expected_prev = entry.entry_hash
    if broken:
        logger.warning("ledger chain verification failed", extra={"chain_id": chain_id, "entries": broken})
    return broken
