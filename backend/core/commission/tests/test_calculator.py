from datetime import timedelta
from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from commission.models import CommissionTransaction
from commission.services import (
    CommissionRuleError,
    calculate_order_commission,
    compute_order_commission,
    create_or_update_commission_settings,
)
from commission.tests.factories import make_contract, make_dealer, make_order
from ledger.models import LedgerEntry
from shop.models import ShopOrder


class ComputeOrderCommissionTests(SimpleTestCase):
    def test_rate_plus_fixed_fee(self):
        self.assertEqual(compute_order_commission("500", "5", "10"), Decimal("35.00"))
        self.assertEqual(compute_order_commission(Decimal("1200"), Decimal("5"), Decimal("10")), Decimal("70.00"))

    def test_rounds_half_up_to_cents(self):
        self.assertEqual(compute_order_commission("99.99", "7.5", "0"), Decimal("7.50"))
        self.assertEqual(compute_order_commission("0.10", "5", "0"), Decimal("0.01"))

    def test_rejects_out_of_range_terms(self):
        with self.assertRaises(CommissionRuleError):
            compute_order_commission("-1", "5", "0")
        with self.assertRaises(CommissionRuleError):
            compute_order_commission("100", "100.5", "0")
        with self.assertRaises(CommissionRuleError):
            compute_order_commission("100", "5", "-1")
        with self.assertRaises(CommissionRuleError):
            compute_order_commission("abc", "5", "0")


class CalculateOrderCommissionTests(TestCase):
    def setUp(self):
        self.parent = make_dealer("kartal")
        self.child = make_dealer("kartal-kadikoy", parent=self.parent)
        self.contract = make_contract(self.parent, self.child)

    def test_accrues_pending_commission_per_order(self):
        amounts = []
        for total in (500, 300, 1200):
            result = calculate_order_commission(make_order(self.child, total).pk)
            self.assertTrue(result.success)
            self.assertEqual(result.message_key, "commissionCalculated")
            amounts.append(result.commission_amount)

        self.assertEqual(amounts, [Decimal("35.00"), Decimal("25.00"), Decimal("70.00")])
        rows = CommissionTransaction.all_objects.filter(commission=self.contract)
        self.assertEqual(rows.count(), 3)
        self.assertEqual(set(rows.values_list("status", flat=True)), {CommissionTransaction.Status.PENDING})
        self.assertFalse(rows.filter(paid_at__isnull=False).exists())

    def test_accrual_snapshots_contract_terms(self):
        result = calculate_order_commission(make_order(self.child, 500).pk)

        accrual = result.instance
        self.assertEqual(accrual.order_total, Decimal("500.00"))
        self.assertEqual(accrual.commission_rate, Decimal("5"))
        self.assertEqual(accrual.fixed_commission, Decimal("10"))
        self.assertEqual(accrual.parent_dealer_id, self.parent.pk)
        self.assertEqual(accrual.child_dealer_id, self.child.pk)

    def test_accrual_is_recorded_in_parent_ledger(self):
        order = make_order(self.child, 500)
        calculate_order_commission(order.pk)

        entry = LedgerEntry.all_objects.get(event_type="commission.accrued")
        self.assertEqual(entry.dealer_id, self.parent.pk)
        self.assertEqual(entry.data_after["commission_amount"], "35.00")
        self.assertEqual(entry.data_after["order_number"], order.order_number)

    def test_second_call_for_same_order_does_not_double_count(self):
        order = make_order(self.child, 500)
        calculate_order_commission(order.pk)

        result = calculate_order_commission(order.pk)

        self.assertFalse(result.success)
        self.assertEqual(result.message_key, "commissionAlreadyRecorded")
        self.assertEqual(result.commission_amount, Decimal("35.00"))
        self.assertEqual(CommissionTransaction.all_objects.filter(order=order).count(), 1)

    def test_zero_commission_succeeds_without_row(self):
        self.contract.order_commission_rate = Decimal("0")
        self.contract.fixed_order_commission = Decimal("0")
        self.contract.save()

        result = calculate_order_commission(make_order(self.child, 500).pk)

        self.assertTrue(result.success)
        self.assertEqual(result.commission_amount, Decimal("0.00"))
        self.assertFalse(CommissionTransaction.all_objects.exists())

    def test_inactive_contract_is_a_no_op(self):
        self.contract.is_active = False
        self.contract.save()

        result = calculate_order_commission(make_order(self.child, 500).pk)

        self.assertFalse(result.success)
        self.assertEqual(result.message_key, "commissionInactive")
        self.assertFalse(CommissionTransaction.all_objects.exists())

    def test_orders_placed_before_the_contract_was_saved_still_accrue(self):
        order = make_order(self.child, 500)
        ShopOrder.all_objects.filter(pk=order.pk).update(created_at=timezone.now() - timedelta(days=2))
        create_or_update_commission_settings(
            self.parent,
            self.child.pk,
            {"order_commission_rate": "5", "fixed_order_commission": "10"},
        )

        result = calculate_order_commission(order.pk)

        self.assertTrue(result.success)
        self.assertEqual(result.commission_amount, Decimal("35.00"))
        self.assertEqual(CommissionTransaction.all_objects.get().order_id, order.pk)

    def test_missing_contract_is_a_no_op(self):
        other_child = make_dealer("kartal-moda", parent=self.parent)

        result = calculate_order_commission(make_order(other_child, 500).pk)

        self.assertFalse(result.success)
        self.assertEqual(result.message_key, "commissionNotFound")
        self.assertFalse(CommissionTransaction.all_objects.exists())

    def test_order_of_root_dealer_has_no_parent(self):
        result = calculate_order_commission(make_order(self.parent, 500).pk)
        self.assertEqual(result.message_key, "noParentDealer")

    def test_unknown_order(self):
        result = calculate_order_commission(987654)
        self.assertEqual(result.message_key, "orderNotFound")
