from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from commission import selectors
from commission.models import CommissionPayout, CommissionTransaction, DealerCommission
from commission.services import calculate_order_commission, process_commission_payout
from commission.tests.factories import make_contract, make_dealer, make_order


class CommissionReadSideTests(TestCase):
    def setUp(self):
        self.parent = make_dealer("kartal")
        self.kadikoy = make_dealer("kartal-kadikoy", parent=self.parent, name="Kadıköy")
        self.moda = make_dealer("kartal-moda", parent=self.parent, name="Moda")
        make_contract(self.parent, self.kadikoy)
        make_contract(
            self.parent,
            self.moda,
            payout_frequency=DealerCommission.PayoutFrequency.WEEKLY,
            minimum_payout=Decimal("0"),
        )
        for total in (500, 300, 1200):
            calculate_order_commission(make_order(self.kadikoy, total).pk)
        calculate_order_commission(make_order(self.moda, 100).pk)

    def test_transactions_filter_and_paginate(self):
        rows, total = selectors.get_commission_transactions(parent=self.parent, child_dealer_id=self.kadikoy.pk)
        self.assertEqual(total, 3)
        self.assertEqual([row.commission_amount for row in rows], [Decimal("70.00"), Decimal("25.00"), Decimal("35.00")])

        rows, total = selectors.get_commission_transactions(parent=self.parent, page=2, limit=3)
        self.assertEqual(total, 4)
        self.assertEqual(len(rows), 1)

        rows, total = selectors.get_commission_transactions(parent=self.parent, status=CommissionTransaction.Status.PAID)
        self.assertEqual(total, 0)

    def test_transactions_date_window(self):
        tomorrow = timezone.localdate() + timedelta(days=1)
        _rows, total = selectors.get_commission_transactions(parent=self.parent, start_date=tomorrow)
        self.assertEqual(total, 0)
        _rows, total = selectors.get_commission_transactions(parent=self.parent, end_date=timezone.localdate())
        self.assertEqual(total, 4)

    def test_report_totals(self):
        process_commission_payout(self.parent, self.kadikoy.pk)

        report = selectors.get_commission_report(parent=self.parent)

        self.assertEqual(report["total_commission"], Decimal("145.00"))
        self.assertEqual(report["paid_commission"], Decimal("130.00"))
        self.assertEqual(report["pending_commission"], Decimal("15.00"))
        self.assertEqual(report["transaction_count"], 4)
        self.assertEqual(len(report["transactions"]), 4)

    def test_pending_payouts(self):
        rows = {row["child_dealer_id"]: row for row in selectors.get_pending_payouts(parent=self.parent)}

        kadikoy = rows[self.kadikoy.pk]
        self.assertEqual(kadikoy["pending_amount"], Decimal("130.00"))
        self.assertEqual(kadikoy["transaction_count"], 3)
        self.assertTrue(kadikoy["can_payout"])
        self.assertEqual(kadikoy["next_payout_on"], timezone.localdate())

        moda = rows[self.moda.pk]
        self.assertEqual(moda["pending_amount"], Decimal("15.00"))
        self.assertTrue(moda["can_payout"])

    def test_next_payout_follows_frequency(self):
        process_commission_payout(self.parent, self.moda.pk)
        last_paid_at = CommissionPayout.all_objects.get(child_dealer=self.moda).paid_at

        rows = {row["child_dealer_id"]: row for row in selectors.get_pending_payouts(parent=self.parent)}

        self.assertEqual(rows[self.moda.pk]["last_payout_at"], last_paid_at)
        self.assertEqual(rows[self.moda.pk]["next_payout_on"], timezone.localdate(last_paid_at) + timedelta(weeks=1))
        self.assertFalse(rows[self.moda.pk]["can_payout"])

    def test_on_demand_contracts_have_no_schedule(self):
        self.assertIsNone(selectors.next_payout_date(DealerCommission.PayoutFrequency.ON_DEMAND, None))

    def test_commissions_by_parent_include_child_details(self):
        contracts = selectors.get_commissions_by_parent(parent=self.parent)
        self.assertEqual({c.child_dealer.slug for c in contracts}, {"kartal-kadikoy", "kartal-moda"})

    def test_list_payouts(self):
        process_commission_payout(self.parent, self.kadikoy.pk)
        self.assertEqual(len(selectors.list_payouts(parent=self.parent)), 1)
        self.assertEqual(selectors.list_payouts(parent=self.parent, child_dealer_id=self.moda.pk), [])
