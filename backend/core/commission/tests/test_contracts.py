from decimal import Decimal

from django.test import TestCase

from commission.models import CommissionTransaction, DealerCommission
from commission.services import (
    calculate_order_commission,
    create_or_update_commission_settings,
    delete_commission_settings,
    process_commission_payout,
    toggle_commission_status,
)
from commission.tests.factories import make_contract, make_dealer, make_order


class CommissionSettingsTests(TestCase):
    def setUp(self):
        self.parent = make_dealer("kartal")
        self.child = make_dealer("kartal-kadikoy", parent=self.parent)

    def test_create_applies_defaults(self):
        result = create_or_update_commission_settings(self.parent, self.child.pk, {"order_commission_rate": "5"})

        self.assertTrue(result.success)
        self.assertEqual(result.message_key, "commissionSettingsUpdated")
        contract = DealerCommission.all_objects.get()
        self.assertEqual(contract.order_commission_rate, Decimal("5.00"))
        self.assertEqual(contract.product_commission_rate, Decimal("0"))
        self.assertEqual(contract.fixed_order_commission, Decimal("0"))
        self.assertEqual(contract.minimum_payout, Decimal("100"))
        self.assertEqual(contract.payout_frequency, DealerCommission.PayoutFrequency.MONTHLY)
        self.assertTrue(contract.is_active)

    def test_upsert_updates_the_existing_pair(self):
        create_or_update_commission_settings(self.parent, self.child.pk, {"order_commission_rate": "5"})
        create_or_update_commission_settings(
            self.parent,
            self.child.pk,
            {"order_commission_rate": "7.5", "payout_frequency": "weekly", "minimum_payout": "250"},
        )

        contract = DealerCommission.all_objects.get()
        self.assertEqual(contract.order_commission_rate, Decimal("7.50"))
        self.assertEqual(contract.payout_frequency, "weekly")
        self.assertEqual(contract.minimum_payout, Decimal("250.00"))

    def test_rejects_out_of_range_values(self):
        result = create_or_update_commission_settings(
            self.parent,
            self.child.pk,
            {
                "order_commission_rate": "150",
                "product_commission_rate": "-1",
                "fixed_order_commission": "-5",
                "minimum_payout": "-1",
                "payout_frequency": "daily",
            },
        )

        self.assertFalse(result.success)
        self.assertEqual(result.message_key, "formValidationError")
        self.assertEqual(
            set(result.errors),
            {
                "order_commission_rate",
                "product_commission_rate",
                "fixed_order_commission",
                "minimum_payout",
                "payout_frequency",
            },
        )
        self.assertFalse(DealerCommission.all_objects.exists())

    def test_save_is_logged_with_outcome(self):
        with self.assertLogs("commission.services.contracts", level="INFO") as logs:
            result = create_or_update_commission_settings(self.parent, self.child.pk, {"order_commission_rate": "5"})

        self.assertTrue(result.success)
        record = logs.records[-1]
        self.assertEqual(record.getMessage(), "commission settings saved")
        self.assertTrue(record.contract_created)

    def test_only_own_sub_dealers_qualify(self):
        stranger_parent = make_dealer("atmaca")
        foreign_child = make_dealer("atmaca-moda", parent=stranger_parent)

        for child_id in (foreign_child.pk, stranger_parent.pk, self.parent.pk):
            result = create_or_update_commission_settings(self.parent, child_id, {"order_commission_rate": "5"})
            self.assertEqual(result.message_key, "subDealerNotFound")
        self.assertFalse(DealerCommission.all_objects.exists())

    def test_toggle_status(self):
        make_contract(self.parent, self.child)

        self.assertEqual(toggle_commission_status(self.parent, self.child.pk, False).message_key, "commissionDeactivated")
        self.assertEqual(toggle_commission_status(self.parent, self.child.pk, True).message_key, "commissionActivated")
        self.assertEqual(
            toggle_commission_status(make_dealer("atmaca"), self.child.pk, True).message_key,
            "commissionNotFound",
        )

    def test_updating_terms_keeps_contract_inactive(self):
        make_contract(self.parent, self.child)
        toggle_commission_status(self.parent, self.child.pk, False)

        result = create_or_update_commission_settings(self.parent, self.child.pk, {"order_commission_rate": "6"})

        self.assertTrue(result.success)
        contract = DealerCommission.all_objects.get()
        self.assertEqual(contract.order_commission_rate, Decimal("6.00"))
        self.assertFalse(contract.is_active)

    def test_deactivating_keeps_history(self):
        contract = make_contract(self.parent, self.child)
        calculate_order_commission(make_order(self.child, 500).pk)

        toggle_commission_status(self.parent, self.child.pk, False)

        self.assertEqual(CommissionTransaction.all_objects.filter(commission=contract).count(), 1)


class DeleteCommissionSettingsTests(TestCase):
    def setUp(self):
        self.parent = make_dealer("kartal")
        self.child = make_dealer("kartal-kadikoy", parent=self.parent)
        self.contract = make_contract(self.parent, self.child)

    def test_rejected_while_pending_rows_exist(self):
        calculate_order_commission(make_order(self.child, 500).pk)

        result = delete_commission_settings(self.parent, self.child.pk)

        self.assertFalse(result.success)
        self.assertEqual(result.message_key, "hasPendingTransactions")
        self.assertTrue(DealerCommission.all_objects.filter(pk=self.contract.pk).exists())

    def test_allowed_without_pending_rows(self):
        result = delete_commission_settings(self.parent, self.child.pk)

        self.assertTrue(result.success)
        self.assertEqual(result.message_key, "commissionDeleted")
        self.assertFalse(DealerCommission.all_objects.exists())

    def test_settled_history_survives_deletion(self):
        for total in (500, 300, 1200):
            calculate_order_commission(make_order(self.child, total).pk)
        process_commission_payout(self.parent, self.child.pk)

        result = delete_commission_settings(self.parent, self.child.pk)

        self.assertTrue(result.success)
        rows = CommissionTransaction.all_objects.filter(parent_dealer=self.parent)
        self.assertEqual(rows.count(), 3)
        self.assertFalse(rows.filter(commission__isnull=False).exists())

    def test_unknown_contract(self):
        other_child = make_dealer("kartal-moda", parent=self.parent)
        self.assertEqual(delete_commission_settings(self.parent, other_child.pk).message_key, "notFound")
