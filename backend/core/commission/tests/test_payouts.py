from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase

from commission.models import CommissionPayout, CommissionTransaction
from commission.selectors import get_commission_stats
from commission.services import calculate_order_commission, process_commission_payout
from commission.tests.factories import make_contract, make_dealer, make_order
from ledger.models import LedgerEntry


class ProcessCommissionPayoutTests(TestCase):
    def setUp(self):
        self.parent = make_dealer("kartal")
        self.child = make_dealer("kartal-kadikoy", parent=self.parent)
        self.contract = make_contract(self.parent, self.child)
        self.owner = get_user_model().objects.create_user(username="owner", password="pass-123")

    def _accrue(self, *totals, child=None):
        for total in totals:
            calculate_order_commission(make_order(child or self.child, total).pk)

    def test_pays_out_all_pending_rows_at_or_above_minimum(self):
        self._accrue(500, 300, 1200)

        result = process_commission_payout(self.parent, self.child.pk, processed_by=self.owner)

        self.assertTrue(result.success)
        self.assertEqual(result.message_key, "payoutProcessed")
        self.assertEqual(result.paid_amount, Decimal("130.00"))
        rows = CommissionTransaction.all_objects.filter(commission=self.contract)
        self.assertEqual(rows.filter(status=CommissionTransaction.Status.PAID).count(), 3)
        self.assertFalse(rows.filter(paid_at__isnull=True).exists())

        payout = CommissionPayout.all_objects.get()
        self.assertEqual(payout.total_amount, Decimal("130.00"))
        self.assertEqual(payout.transaction_count, 3)
        self.assertEqual(payout.processed_by, self.owner)
        self.assertEqual(set(rows.values_list("payout_id", flat=True)), {payout.pk})
        self.assertEqual(set(rows.values_list("paid_at", flat=True)), {payout.paid_at})

    def test_below_minimum_changes_nothing(self):
        self._accrue(100)

        result = process_commission_payout(self.parent, self.child.pk)

        self.assertFalse(result.success)
        self.assertEqual(result.message_key, "belowMinimumPayout")
        accrual = CommissionTransaction.all_objects.get()
        self.assertEqual(accrual.commission_amount, Decimal("15.00"))
        self.assertEqual(accrual.status, CommissionTransaction.Status.PENDING)
        self.assertIsNone(accrual.paid_at)
        self.assertFalse(CommissionPayout.all_objects.exists())

    def test_no_pending_transactions(self):
        result = process_commission_payout(self.parent, self.child.pk)
        self.assertEqual(result.message_key, "noPendingTransactions")

    def test_second_payout_finds_nothing_pending(self):
        self._accrue(500, 300, 1200)
        process_commission_payout(self.parent, self.child.pk)

        result = process_commission_payout(self.parent, self.child.pk)

        self.assertEqual(result.message_key, "noPendingTransactions")
        self.assertEqual(CommissionPayout.all_objects.count(), 1)

    def test_missing_contract(self):
        stranger = make_dealer("atmaca")
        result = process_commission_payout(stranger, self.child.pk)
        self.assertEqual(result.message_key, "commissionNotFound")

    def test_only_settles_rows_of_that_contract(self):
        sibling = make_dealer("kartal-moda", parent=self.parent)
        make_contract(self.parent, sibling)
        self._accrue(500, 300, 1200)
        self._accrue(2000, child=sibling)

        process_commission_payout(self.parent, self.child.pk)

        sibling_row = CommissionTransaction.all_objects.get(child_dealer=sibling)
        self.assertEqual(sibling_row.status, CommissionTransaction.Status.PENDING)

    def test_inactive_contract_can_still_settle_accrued_rows(self):
        self._accrue(500, 300, 1200)
        self.contract.is_active = False
        self.contract.save()

        result = process_commission_payout(self.parent, self.child.pk)

        self.assertEqual(result.message_key, "payoutProcessed")

    def test_payout_is_recorded_in_ledger(self):
        self._accrue(500, 300, 1200)
        process_commission_payout(self.parent, self.child.pk, processed_by=self.owner)

        entry = LedgerEntry.all_objects.get(event_type="commission.payout_processed")
        self.assertEqual(entry.dealer_id, self.parent.pk)
        self.assertEqual(entry.data_after["total_amount"], "130.00")
        self.assertEqual(len(entry.data_after["transaction_ids"]), 3)

    def test_transactions_cannot_be_deleted(self):
        self._accrue(500)
        with self.assertRaises(ValidationError):
            CommissionTransaction.all_objects.get().delete()


class CommissionStatsTests(TestCase):
    def setUp(self):
        self.parent = make_dealer("kartal")
        self.child = make_dealer("kartal-kadikoy", parent=self.parent)
        self.other_child = make_dealer("kartal-moda", parent=self.parent)
        make_contract(self.parent, self.child)
        make_contract(self.parent, self.other_child, is_active=False)

    def test_stats_before_and_after_payout(self):
        for total in (500, 300, 1200):
            calculate_order_commission(make_order(self.child, total).pk)

        stats = get_commission_stats(parent=self.parent)
        self.assertEqual(stats["total_earned"], Decimal("130.00"))
        self.assertEqual(stats["pending_payouts"], Decimal("130.00"))
        self.assertEqual(stats["paid_payouts"], Decimal("0.00"))
        self.assertEqual(stats["active_sub_dealers"], 1)

        process_commission_payout(self.parent, self.child.pk)

        stats = get_commission_stats(parent=self.parent)
        self.assertEqual(stats["pending_payouts"], Decimal("0.00"))
        self.assertEqual(stats["paid_payouts"], Decimal("130.00"))

    def test_stats_are_idempotent(self):
        calculate_order_commission(make_order(self.child, 500).pk)

        self.assertEqual(get_commission_stats(parent=self.parent), get_commission_stats(parent=self.parent))

    def test_stats_are_scoped_to_parent(self):
        calculate_order_commission(make_order(self.child, 500).pk)
        stranger = make_dealer("atmaca")

        stats = get_commission_stats(parent=stranger)

        self.assertEqual(stats["total_earned"], Decimal("0.00"))
        self.assertEqual(stats["active_sub_dealers"], 0)
