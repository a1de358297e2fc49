"""
Tests for prom quote comparison: badge scoring and the quotes API
"""
from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase, TestCase
from rest_framework import status

from apps.core.test_utils import AuthenticatedAPIClient, TestDataFactory
from .models import PromQuote
from .services import NO_BADGES, QuoteBadges, badges_by_quote, compute_badges, summarize_categories


def quote(id, price, rating=None, category="dj"):
    return SimpleNamespace(id=id, category=category, price_total=Decimal(str(price)), rating=rating)


class QuoteBadgeTests(SimpleTestCase):
    """Pure badge scoring"""

    def test_cheapest_with_ties(self):
        quotes = [quote("a", 100), quote("b", 100), quote("c", 200)]

        self.assertTrue(compute_badges(quotes[0], quotes).cheapest)
        self.assertTrue(compute_badges(quotes[1], quotes).cheapest)
        self.assertFalse(compute_badges(quotes[2], quotes).cheapest)

    def test_lone_quote_is_never_cheapest(self):
        alone = quote("a", 100)

        self.assertFalse(compute_badges(alone, [alone]).cheapest)

    def test_lone_quote_can_be_best_value(self):
        alone = quote("a", 100, rating=5)

        self.assertEqual(compute_badges(alone, [alone]), QuoteBadges(cheapest=False, highest_rated=False, best_value=True))

    def test_highest_rated_ignores_unrated_quotes(self):
        quotes = [quote("five", 300, rating=5), quote("three", 200, rating=3), quote("none", 100)]

        self.assertTrue(compute_badges(quotes[0], quotes).highest_rated)
        self.assertFalse(compute_badges(quotes[1], quotes).highest_rated)
        self.assertFalse(compute_badges(quotes[2], quotes).highest_rated)

    def test_highest_rated_needs_two_rated_quotes(self):
        quotes = [quote("rated", 300, rating=5), quote("unrated", 200)]

        self.assertFalse(compute_badges(quotes[0], quotes).highest_rated)

    def test_highest_rated_ties(self):
        quotes = [quote("a", 300, rating=4), quote("b", 200, rating=4), quote("c", 100, rating=2)]

        flagged = [q.id for q in quotes if compute_badges(q, quotes).highest_rated]

        self.assertEqual(flagged, ["a", "b"])

    def test_best_value_needs_rating_of_four(self):
        quotes = [quote("good", 100, rating=4), quote("ok", 100, rating=3), quote("pricey", 400, rating=5)]

        self.assertTrue(compute_badges(quotes[0], quotes).best_value)
        self.assertFalse(compute_badges(quotes[1], quotes).best_value)
        # 400 > mean of 200
        self.assertFalse(compute_badges(quotes[2], quotes).best_value)

    def test_best_value_at_exact_mean(self):
        quotes = [quote("low", 100), quote("mid", 200, rating=5), quote("high", 300)]

        self.assertTrue(compute_badges(quotes[1], quotes).best_value)

    def test_comparisons_stay_within_category(self):
        dj = quote("dj", 5000, category="dj")
        venue = quote("venue", 100, category="venue")
        other_dj = quote("dj-2", 6000, category="dj")
        quotes = [dj, venue, other_dj]

        self.assertTrue(compute_badges(dj, quotes).cheapest)
        self.assertFalse(compute_badges(venue, quotes).cheapest)

    def test_no_peers(self):
        self.assertEqual(compute_badges(quote("a", 100, rating=5, category="host"), []), NO_BADGES)

    def test_dj_scenario(self):
        q1 = quote("q1", 3000, rating=5)
        q2 = quote("q2", 2500, rating=3)
        q3 = quote("q3", 2500)
        quotes = [q1, q2, q3]

        self.assertEqual(compute_badges(q1, quotes), QuoteBadges(cheapest=False, highest_rated=True, best_value=False))
        self.assertEqual(compute_badges(q2, quotes), QuoteBadges(cheapest=True, highest_rated=False, best_value=False))
        self.assertEqual(compute_badges(q3, quotes), QuoteBadges(cheapest=True, highest_rated=False, best_value=False))

    def test_badges_by_quote_matches_compute_badges(self):
        quotes = [
            quote("q1", 3000, rating=5),
            quote("q2", 2500, rating=3),
            quote("v1", 9000, rating=4, category="venue"),
            quote("v2", 12000, rating=5, category="venue"),
        ]

        badges = badges_by_quote(quotes)

        self.assertEqual(set(badges), {"q1", "q2", "v1", "v2"})
        for q in quotes:
            self.assertEqual(badges[q.id], compute_badges(q, quotes))

    def test_summarize_categories(self):
        quotes = [
            quote("v1", 9000, rating=4, category="venue"),
            quote("q1", 3000, rating=5),
            quote("q2", 2500, rating=3),
            quote("q3", 2500),
        ]

        summaries = summarize_categories(quotes, order=["venue", "catering", "dj"])

        self.assertEqual([s.category for s in summaries], ["venue", "dj"])
        dj = summaries[1]
        self.assertEqual(dj.count, 3)
        self.assertEqual(dj.min_price, Decimal("2500"))
        self.assertEqual(dj.max_price, Decimal("3000"))
        self.assertEqual(dj.avg_price, Decimal("2667"))
        self.assertEqual(dj.cheapest_ids, ["q2", "q3"])
        self.assertEqual(dj.highest_rated_ids, ["q1"])
        self.assertEqual(dj.best_value_ids, [])
        self.assertEqual(summaries[0].best_value_ids, ["v1"])


class PromQuoteApiTests(TestCase):
    """Quotes API"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.prom = TestDataFactory.create_prom()
        self.q1 = TestDataFactory.create_quote(self.prom, price_total=3000, rating=5, vendor_phone="050-1234567", admin_notes="call back")
        self.q2 = TestDataFactory.create_quote(self.prom, price_total=2500, rating=3, is_finalist=True)
        self.q3 = TestDataFactory.create_quote(self.prom, price_total=2500)
        self.venue = TestDataFactory.create_quote(self.prom, category="venue", price_total=1000, rating=4)
        self.url = f"/api/v1/prom/{self.prom.id}/quotes/"

    def _by_id(self, response):
        return {row["id"]: row for row in response.data}

    def test_list_includes_badges(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        rows = self._by_id(response)
        self.assertEqual(len(rows), 4)
        self.assertEqual(rows[str(self.q1.id)]["badges"], {"cheapest": False, "highest_rated": True, "best_value": False})
        self.assertEqual(rows[str(self.q2.id)]["badges"], {"cheapest": True, "highest_rated": False, "best_value": False})
        self.assertEqual(rows[str(self.venue.id)]["badges"], {"cheapest": False, "highest_rated": False, "best_value": True})

    def test_filters_do_not_change_badges(self):
        response = self.client.get(self.url, {"finalists": "true"})

        rows = self._by_id(response)
        self.assertEqual(list(rows), [str(self.q2.id)])
        self.assertTrue(rows[str(self.q2.id)]["badges"]["cheapest"])

    def test_category_filter(self):
        response = self.client.get(self.url, {"category": "venue"})

        self.assertEqual(list(self._by_id(response)), [str(self.venue.id)])

    def test_private_fields_hidden_from_public(self):
        response = self.client.get(f"{self.url}{self.q1.id}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn("vendor_phone", response.data)
        self.assertNotIn("admin_notes", response.data)

    def test_private_fields_shown_to_editors(self):
        self.client.authenticate_user(TestDataFactory.create_user(role="editor"))

        response = self.client.get(f"{self.url}{self.q1.id}/")

        self.assertEqual(response.data["vendor_phone"], "050-1234567")
        self.assertEqual(response.data["admin_notes"], "call back")

    def test_create_requires_editor(self):
        payload = {"vendor_name": "DJ Noa", "category": "dj", "price_total": "2000"}

        anonymous = self.client.post(self.url, payload, format="json")
        self.client.authenticate_user(TestDataFactory.create_user(role="member"))
        member = self.client.post(self.url, payload, format="json")

        self.assertEqual(anonymous.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(member.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(PromQuote.objects.count(), 4)

    def test_create_rescores_the_category(self):
        self.client.authenticate_user(TestDataFactory.create_user(role="admin"))

        response = self.client.post(
            self.url,
            {"vendor_name": "DJ Noa", "category": "dj", "price_total": "2000", "rating": 4},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["badges"], {"cheapest": True, "highest_rated": False, "best_value": True})
        self.assertEqual(response.data["prom_id"], str(self.prom.id))

        listing = self._by_id(self.client.get(self.url))
        self.assertFalse(listing[str(self.q2.id)]["badges"]["cheapest"])

    def test_create_validates_rating(self):
        self.client.authenticate_user(TestDataFactory.create_user(role="editor"))

        response = self.client.post(
            self.url,
            {"vendor_name": "DJ Noa", "category": "dj", "price_total": "2000", "rating": 7},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["field"], "rating")

    def test_unknown_prom(self):
        response = self.client.get("/api/v1/prom/00000000-0000-0000-0000-000000000000/quotes/")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data["success"])

    def test_comparison(self):
        response = self.client.get(f"{self.url}comparison/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        categories = {row["category"]: row for row in response.data["categories"]}
        self.assertEqual(list(categories), ["venue", "dj"])
        self.assertEqual(categories["dj"]["count"], 3)
        self.assertEqual(categories["dj"]["avg_price"], "2667")
        self.assertEqual(set(categories["dj"]["cheapest_ids"]), {str(self.q2.id), str(self.q3.id)})
        self.assertEqual(categories["dj"]["highest_rated_ids"], [str(self.q1.id)])

    def test_comparison_unknown_prom(self):
        response = self.client.get("/api/v1/prom/not-a-uuid/quotes/comparison/")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class PromEventApiTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_status_filter(self):
        TestDataFactory.create_prom(title="Prom 2025", status="completed")
        TestDataFactory.create_prom(title="Prom 2026", status="planning")

        response = self.client.get("/api/v1/prom/", {"status": "planning"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["title"] for row in response.data["results"]], ["Prom 2026"])

    def test_editor_creates_event(self):
        self.client.authenticate_user(TestDataFactory.create_user(role="editor"))

        response = self.client.post("/api/v1/prom/", {"title": "Prom 2027", "total_budget": "50000"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "planning")
        self.assertEqual(response.data["quote_count"], 0)

    def test_title_too_short(self):
        self.client.authenticate_user(TestDataFactory.create_user(role="admin"))

        response = self.client.post("/api/v1/prom/", {"title": "P"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["field"], "title")
