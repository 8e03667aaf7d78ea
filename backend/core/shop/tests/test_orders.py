import re
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from dealers.models import Dealer
from shop.models import ShopOrder, generate_order_number
from tenancy.context import reset_current_dealer, set_current_dealer


class ShopOrderTests(TestCase):
    def setUp(self):
        self.dealer = Dealer.objects.create(name="Kartal Akademi", slug="kartal")
        self.other = Dealer.objects.create(name="Atmaca Spor", slug="atmaca")

    def test_order_number_format(self):
        self.assertRegex(generate_order_number(), re.compile(r"^ORD-[0-9A-Z]+-[0-9A-Z]{4}$"))

    def test_orders_get_distinct_numbers(self):
        first = ShopOrder.all_objects.create(dealer=self.dealer, customer_name="Ali", total=Decimal("10.00"))
        second = ShopOrder.all_objects.create(dealer=self.dealer, customer_name="Ayşe", total=Decimal("10.00"))
        self.assertNotEqual(first.order_number, second.order_number)

    def test_default_manager_fails_closed_without_dealer_context(self):
        ShopOrder.all_objects.create(dealer=self.dealer, customer_name="Ali", total=Decimal("10.00"))
        self.assertEqual(ShopOrder.objects.count(), 0)
        self.assertEqual(ShopOrder.all_objects.count(), 1)

    def test_default_manager_scopes_to_bound_dealer(self):
        ShopOrder.all_objects.create(dealer=self.dealer, customer_name="Ali", total=Decimal("10.00"))
        ShopOrder.all_objects.create(dealer=self.other, customer_name="Veli", total=Decimal("20.00"))

        token = set_current_dealer(self.dealer)
        try:
            self.assertEqual(list(ShopOrder.objects.values_list("customer_name", flat=True)), ["Ali"])
        finally:
            reset_current_dealer(token)

    def test_cross_dealer_write_is_blocked(self):
        token = set_current_dealer(self.dealer)
        try:
            with self.assertRaises(ValidationError):
                ShopOrder(dealer=self.other, customer_name="Veli", total=Decimal("20.00")).save()
        finally:
            reset_current_dealer(token)
