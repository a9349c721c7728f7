"""Tests for the DCM toolset, exercised through tool dispatch."""

from django.test import SimpleTestCase

from agent.tools.dispatch import dispatch_tool_call
from agent.tools.registry import ToolRegistry
from agent.types.context import RunContext
from agent.types.messages import ToolCall
from dcm.tools import build_dcm_toolset


class DcmToolsetTests(SimpleTestCase):
    def setUp(self):
        super().setUp()
        self.registry = ToolRegistry()
        self.registry.register_tools(build_dcm_toolset())
        self.context = RunContext.create()

    def call(self, name, **arguments):
        outcome = dispatch_tool_call(
            self.registry, ToolCall(id=f"call_{name}", name=name, arguments=arguments), self.context
        )
        self.assertEqual(outcome.status, "result")
        return outcome.result

    def test_registration_order(self):
        self.assertEqual(
            self.registry.names(),
            [
                "resolve_entity",
                "get_issuer_deals",
                "get_peer_comparison",
                "get_allocations",
                "get_performance",
                "get_participation_history",
                "generate_mandate_brief",
                "get_market_deals",
                "get_sector_curve",
                "get_investor_list",
                "get_top_investors_for_issuer",
                "show_table",
                "show_chart",
                "collect_filters",
                "confirm_action",
            ],
        )

    def test_every_server_tool_names_a_widget(self):
        for tool in self.registry.list_tools():
            self.assertIsNotNone(tool.widget, tool.name)

    # resolve_entity

    def test_resolve_exact_alias(self):
        result = self.call("resolve_entity", query="BMW", type="issuer")
        self.assertEqual(result["confidence"], "exact")
        self.assertEqual([m["id"] for m in result["matches"]], ["bmw-ag"])

    def test_resolve_ambiguous(self):
        result = self.call("resolve_entity", query="ag", type="issuer")
        self.assertEqual(result["confidence"], "ambiguous")
        self.assertLessEqual(len(result["matches"]), 5)

    def test_resolve_no_match(self):
        result = self.call("resolve_entity", query="Acme Corp", type="issuer")
        self.assertEqual(result, {"matches": [], "confidence": "fuzzy", "query": "Acme Corp"})

    def test_resolve_bond_by_isin(self):
        result = self.call("resolve_entity", query="xs2790123456", type="bond")
        self.assertEqual(result["confidence"], "exact")
        self.assertEqual(result["matches"][0]["id"], "shell-plc")

    # issuance

    def test_issuer_deals(self):
        result = self.call("get_issuer_deals", issuerId="volkswagen-ag")
        self.assertEqual(result["issuer"]["name"], "Volkswagen AG")
        self.assertEqual(result["summary"]["totalDeals"], 3)
        self.assertEqual(result["deals"][0]["id"], "deal-vw-001")

    def test_issuer_deals_for_issuer_without_deals(self):
        result = self.call("get_issuer_deals", issuerId="audi-ag")
        self.assertEqual(result["deals"], [])
        self.assertEqual(result["summary"]["totalDeals"], 0)

    def test_unknown_issuer_becomes_error_result(self):
        result = self.call("get_issuer_deals", issuerId="acme")
        self.assertEqual(result, {"error": "Issuer not found: acme"})

    def test_peer_comparison(self):
        result = self.call("get_peer_comparison", issuerId="bmw-ag")
        self.assertEqual(
            [p["issuerId"] for p in result["peers"]],
            ["volkswagen-ag", "mercedes-benz-ag", "porsche-ag", "audi-ag"],
        )
        self.assertLessEqual(len(result["issuerDeals"]), 5)
        self.assertTrue(
            result["comparison"]["nipVsPeers"].endswith("than peers")
            or result["comparison"]["nipVsPeers"] == "In line with peers"
        )

    def test_peer_comparison_without_peers(self):
        result = self.call("get_peer_comparison", issuerId="basf-se")
        self.assertEqual(result["peers"], [])
        self.assertEqual(result["comparison"]["nipVsPeers"], "5bps wider than peers")

    def test_market_deals_defaults(self):
        result = self.call("get_market_deals")
        self.assertEqual(result["filters"], {"sector": "All", "currency": "All", "issuer": "All", "showing": 10})
        self.assertEqual(result["summary"]["totalDeals"], 10)
        self.assertIn("EUR", result["availableFilters"]["currencies"])

    def test_market_deals_limit_capped(self):
        result = self.call("get_market_deals", limit=500)
        self.assertEqual(result["filters"]["showing"], 18)

    def test_market_deals_filters(self):
        result = self.call("get_market_deals", sector="Energy", currency="All")
        self.assertEqual({d["issuerId"] for d in result["deals"]}, {"totalenergies-se", "shell-plc"})
        self.assertEqual(result["filters"]["currency"], "All")

    # bookbuild

    def test_allocations(self):
        result = self.call("get_allocations", dealId="deal-bmw-001")
        self.assertEqual(result["deal"]["size"], 1000)
        self.assertEqual(result["summary"]["totalInvestors"], len(result["allocations"]))
        self.assertTrue(all(a["dealId"] == "deal-bmw-001" for a in result["allocations"]))
        self.assertEqual(
            sum(r["amount"] for r in result["breakdown"]["byGeography"]), result["summary"]["totalAllocated"]
        )

    def test_unknown_deal(self):
        self.assertEqual(self.call("get_allocations", dealId="deal-x"), {"error": "Deal not found: deal-x"})

    # secondary

    def test_performance(self):
        result = self.call("get_performance", isin="XS2725478901", days=365)
        self.assertEqual(result["bond"]["issuer"], "BMW AG")
        self.assertLessEqual(result["performance"][-1]["daysFromPricing"], 90)
        self.assertEqual(result["analysis"]["driftBps"], result["drift"])
        self.assertIn(result["analysis"]["trend"], {"Tightening", "Widening", "Stable"})

    def test_unknown_isin(self):
        self.assertEqual(self.call("get_performance", isin="XS0"), {"error": "Bond not found: XS0"})

    # investors

    def test_participation_history(self):
        result = self.call("get_participation_history", issuerId="bmw-ag")
        self.assertLessEqual(len(result["participations"]), 15)
        self.assertGreater(result["summary"]["totalParticipations"], 15)
        self.assertIsInstance(result["summary"]["holdPercentage"], int)

    def test_participation_history_without_deals(self):
        result = self.call("get_participation_history", issuerId="audi-ag")
        self.assertEqual(
            result["summary"], {"totalParticipations": 0, "holdPercentage": 0, "flipPercentage": 0}
        )

    def test_investor_list_filters_and_scores(self):
        result = self.call("get_investor_list", type="Pension")
        self.assertEqual([i["id"] for i in result["investors"]], ["calpers", "abp", "gpif"])
        self.assertEqual(result["total"], 3)
        for investor in result["investors"]:
            self.assertTrue(0 <= investor["flipScore"] <= 100)

        self.assertEqual(self.call("get_investor_list", geography="Atlantis"), {"investors": [], "total": 0})

    def test_top_investors_for_issuer(self):
        result = self.call("get_top_investors_for_issuer", issuerId="bmw-ag", limit=5)
        top = result["topInvestors"]
        self.assertEqual(result["issuerId"], "bmw-ag")
        self.assertEqual(len(top), 5)
        allocated = [i["totalAllocated"] for i in top]
        self.assertEqual(allocated, sorted(allocated, reverse=True))
        for investor in top:
            self.assertIn(investor["dominantBehaviour"], {"hold", "flip", "mixed"})
            self.assertTrue(0 <= investor["flipScore"] <= 100)
            self.assertGreaterEqual(investor["participationCount"], 1)

    def test_top_investors_unknown_issuer(self):
        self.assertEqual(
            self.call("get_top_investors_for_issuer", issuerId="acme"), {"error": "Issuer not found: acme"}
        )

    def test_top_investors_without_deals(self):
        self.assertEqual(self.call("get_top_investors_for_issuer", issuerId="audi-ag")["topInvestors"], [])

    # curves

    def test_sector_curve_is_chart_shaped(self):
        result = self.call("get_sector_curve", sector="Automobiles", rating="A")
        self.assertEqual(result["type"], "line")
        self.assertEqual((result["xKey"], result["yKey"]), ("tenor", "spread"))
        self.assertEqual([p["tenor"] for p in result["data"]][:3], ["1Y", "2Y", "3Y"])
        self.assertEqual(result["benchmark"], "EUR Mid-Swap")
        self.assertEqual(result["title"], "Automobiles A curve vs EUR Mid-Swap")

    # export

    def test_mandate_brief(self):
        result = self.call("generate_mandate_brief", issuerId="bmw-ag")
        brief = result["brief"]
        self.assertEqual(
            [s["title"] for s in brief["sections"]],
            ["Issuer Overview", "Issuance History", "Peer Comparison", "Investor Analysis", "Secondary Performance"],
        )
        self.assertEqual(
            brief["provenance"]["sources"],
            ["mcp-entity-resolution", "mcp-issuance", "mcp-bookbuild", "mcp-investor", "mcp-secondary"],
        )
        self.assertEqual(result["exportFormats"], ["pdf", "pptx", "xlsx", "email"])
        self.assertIn("€3,750M", brief["sections"][1]["content"])
        peer_names = {p["issuer"] for p in brief["sections"][2]["dataPoints"]}
        self.assertTrue(peer_names)
        self.assertLessEqual(peer_names, {"Volkswagen AG", "Mercedes-Benz", "Porsche AG"})

    def test_mandate_brief_selected_sections(self):
        result = self.call("generate_mandate_brief", issuerId="audi-ag", sections=["overview", "investor_analysis"])
        self.assertEqual([s["title"] for s in result["brief"]["sections"]], ["Issuer Overview"])

    def test_progress_labels_use_arguments(self):
        tool = self.registry.resolve("get_allocations")
        self.assertEqual(tool.describe_progress({"dealId": "deal-bmw-001"}), "Loading allocations for deal-bmw-001...")
        self.assertEqual(tool.describe_progress({}), "Loading allocations for {dealId}...")
