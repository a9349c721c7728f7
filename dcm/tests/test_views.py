"""Tests for the dashboard JSON endpoints."""

from django.test import SimpleTestCase


class DashboardViewTests(SimpleTestCase):
    def test_deals(self):
        response = self.client.get("/api/data/deals")
        self.assertEqual(response.status_code, 200)
        deals = response.json()["deals"]
        self.assertEqual(len(deals), 18)
        self.assertEqual(deals[0]["id"], "deal-mb-001")

    def test_allocations(self):
        rows = self.client.get("/api/data/allocations").json()["allocations"]
        self.assertEqual(len(rows), 6)
        for row in rows:
            self.assertLessEqual(len(row["topInvestorTypes"]), 3)
            shares = [t["percentage"] for t in row["topInvestorTypes"]]
            self.assertEqual(shares, sorted(shares, reverse=True))

    def test_secondary(self):
        rows = self.client.get("/api/data/secondary").json()["secondary"]
        self.assertEqual(len(rows), 10)
        for row in rows:
            self.assertEqual(row["spreadDrift"], row["currentSpread"] - row["issueSpread"])
            self.assertIn(row["trend"], {"Tightening", "Widening", "Stable"})

    def test_post_not_allowed(self):
        self.assertEqual(self.client.post("/api/data/deals").status_code, 405)
