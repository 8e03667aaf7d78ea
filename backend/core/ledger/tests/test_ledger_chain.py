from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase

from dealers.models import Dealer, DealerMembership
from ledger.models import LedgerEntry
from ledger.services import append_ledger_entry, chain_id_for, verify_chain
from tenancy.context import reset_current_dealer, set_current_dealer


class LedgerChainTests(TestCase):
    def setUp(self):
        self.dealer = Dealer.objects.create(name="Kartal Akademi", slug="kartal")
        self.user = get_user_model().objects.create_user(username="owner", password="pass-123")

    def _append(self, **kwargs):
        params = {
            "dealer": self.dealer,
            "actor": self.user,
            "action": LedgerEntry.ACTION_UPDATE,
            "resource_label": "dealers.dealer",
            "resource_pk": self.dealer.pk,
        }
        params.update(kwargs)
        return append_ledger_entry(**params)

    def test_entries_link_to_previous_hash(self):
        first = self._append(data_after={"is_active": True})
        second = self._append(data_after={"is_active": False})

        self.assertEqual(first.prev_hash, "")
        self.assertEqual(second.prev_hash, first.entry_hash)
        self.assertEqual(first.chain_id, f"dealer:{self.dealer.pk}")
        self.assertEqual(verify_chain(chain_id_for(self.dealer)), [])

    def test_default_event_type_is_derived_from_resource_and_action(self):
        entry = self._append()
        self.assertEqual(entry.event_type, "dealers.dealer.update")
        self.assertEqual(entry.actor_username, "owner")

    def test_decimal_payloads_are_stored_as_strings(self):
        from decimal import Decimal

        entry = self._append(metadata={"amount": Decimal("35.00")})
        entry.refresh_from_db()
        self.assertEqual(entry.metadata, {"amount": "35.00"})
        self.assertEqual(verify_chain(entry.chain_id), [])

    def test_entries_cannot_be_updated_or_deleted(self):
        entry = self._append()
        entry.event_type = "tampered"
        with self.assertRaises(ValidationError):
            entry.save()
        with self.assertRaises(ValidationError):
            entry.delete()

    def test_verify_chain_detects_out_of_band_edit(self):
        first = self._append(data_after={"name": "Kartal"})
        self._append(data_after={"name": "Kartal Akademi"})

        LedgerEntry.all_objects.filter(pk=first.pk).update(data_after={"name": "Forged"})

        self.assertEqual(verify_chain(chain_id_for(self.dealer)), [first.pk])

    def test_platform_entries_have_no_dealer(self):
        entry = append_ledger_entry(
            dealer=None,
            actor=None,
            action=LedgerEntry.ACTION_SYSTEM,
            resource_label="platform",
            resource_pk="",
        )
        self.assertEqual(entry.scope, LedgerEntry.SCOPE_PLATFORM)
        self.assertEqual(entry.chain_id, "platform")

    def test_chain_head_and_order(self):
        chain_id = chain_id_for(self.dealer)
        self.assertEqual(LedgerEntry.all_objects.head_hash(chain_id), "")

        first = self._append()
        second = self._append()

        self.assertEqual(LedgerEntry.all_objects.head_hash(chain_id), second.entry_hash)
        self.assertEqual(list(LedgerEntry.all_objects.chain(chain_id)), [first, second])

    def test_entries_for_another_dealer_are_blocked_inside_a_request(self):
        other = Dealer.objects.create(name="Atmaca", slug="atmaca")
        token = set_current_dealer(other)
        try:
            with self.assertRaises(ValidationError):
                self._append()
        finally:
            reset_current_dealer(token)
        self.assertFalse(LedgerEntry.all_objects.exists())

    def test_rejects_unknown_action(self):
        with self.assertRaises(ValueError):
            self._append(action="PURGE")


class DealerLedgerAPITests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.dealer = Dealer.objects.create(name="Kartal Akademi", slug="kartal")
        self.other = Dealer.objects.create(name="Atmaca Spor", slug="atmaca")
        self.owner = User.objects.create_user(username="owner", password="pass-123")
        self.member = User.objects.create_user(username="member", password="pass-123")
        DealerMembership.objects.create(dealer=self.dealer, user=self.owner, role=DealerMembership.ROLE_OWNER)
        DealerMembership.objects.create(dealer=self.dealer, user=self.member, role=DealerMembership.ROLE_MEMBER)

        for dealer in (self.dealer, self.other):
            append_ledger_entry(
                dealer=dealer,
                actor=None,
                action=LedgerEntry.ACTION_SYSTEM,
                resource_label="dealers.dealer",
                resource_pk=dealer.pk,
            )

    def test_owner_sees_only_own_chain(self):
        self.client.force_login(self.owner)
        response = self.client.get("/api/ledger/", HTTP_X_DEALER_ID="kartal")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(len(payload), 1)
        self.assertEqual(payload[0]["dealer_id"], self.dealer.pk)

    def test_member_cannot_read_ledger(self):
        self.client.force_login(self.member)
        response = self.client.get("/api/ledger/", HTTP_X_DEALER_ID="kartal")
        self.assertEqual(response.status_code, 403)
