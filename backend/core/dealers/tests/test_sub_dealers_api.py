from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings

from dealers.models import Dealer, DealerMembership


@override_settings(ALLOWED_HOSTS=["testserver", ".example.com"])
class SubDealersAPITests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.root = Dealer.objects.create(name="Kartal Akademi", slug="kartal")
        self.owner = User.objects.create_user(username="owner", password="pass-123")
        self.member = User.objects.create_user(username="member", password="pass-123")
        DealerMembership.objects.create(dealer=self.root, user=self.owner, role=DealerMembership.ROLE_OWNER)
        DealerMembership.objects.create(dealer=self.root, user=self.member, role=DealerMembership.ROLE_MEMBER)

    def _post(self, path, data):
        return self.client.post(path, data=data, content_type="application/json", HTTP_X_DEALER_ID="kartal")

    def test_requires_dealer_header(self):
        self.client.force_login(self.owner)
        response = self.client.get("/api/sub-dealers/")
        self.assertEqual(response.status_code, 400)

    def test_member_can_list_but_not_create(self):
        self.client.force_login(self.member)
        self.assertEqual(self.client.get("/api/sub-dealers/", HTTP_X_DEALER_ID="kartal").status_code, 200)
        response = self._post("/api/sub-dealers/", {"name": "Kadıköy", "slug": "kadikoy"})
        self.assertEqual(response.status_code, 403)

    def test_owner_creates_and_reads_sub_dealer(self):
        self.client.force_login(self.owner)
        response = self._post("/api/sub-dealers/", {"name": "Kadıköy", "slug": "kadikoy"})

        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["message_key"], "subDealerCreated")
        self.assertEqual(payload["data"]["hierarchy_level"], 1)
        self.assertEqual(payload["data"]["parent_dealer_slug"], "kartal")

        detail = self.client.get(f"/api/sub-dealers/{payload['data']['id']}/", HTTP_X_DEALER_ID="kartal")
        self.assertEqual(detail.status_code, 200)
        self.assertEqual(detail.json()["slug"], "kadikoy")

    def test_validation_errors_map_to_400(self):
        self.client.force_login(self.owner)
        response = self._post("/api/sub-dealers/", {"name": "K", "slug": "UPPER"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message_key"], "formValidationError")

    def test_slug_conflict_maps_to_409(self):
        self.client.force_login(self.owner)
        response = self._post("/api/sub-dealers/", {"name": "Kartal 2", "slug": "kartal"})

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["message_key"], "slugExists")

    def test_status_toggle_and_delete(self):
        child = Dealer.objects.create(name="Kadıköy", slug="kadikoy", parent_dealer=self.root)
        self.client.force_login(self.owner)

        response = self._post(f"/api/sub-dealers/{child.pk}/status/", {"is_active": False})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message_key"], "subDealerDeactivated")

        response = self.client.delete(f"/api/sub-dealers/{child.pk}/", HTTP_X_DEALER_ID="kartal")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message_key"], "subDealerDeleted")

        response = self.client.get(f"/api/sub-dealers/{child.pk}/", HTTP_X_DEALER_ID="kartal")
        self.assertEqual(response.status_code, 404)

    def test_hierarchy_and_stats_endpoints(self):
        child = Dealer.objects.create(name="Kadıköy", slug="kadikoy", parent_dealer=self.root)
        Dealer.objects.create(name="Moda", slug="moda", parent_dealer=child)
        self.client.force_login(self.member)

        hierarchy = self.client.get("/api/sub-dealers/hierarchy/", HTTP_X_DEALER_ID="kartal").json()
        self.assertEqual([(n["slug"], n["depth"]) for n in hierarchy], [("kadikoy", 1), ("moda", 2)])

        stats = self.client.get("/api/sub-dealers/stats/", HTTP_X_DEALER_ID="kartal").json()
        self.assertEqual(stats["total_sub_dealers"], 1)
