"""Tests for the tool invocation renderer contract."""

from django.test import SimpleTestCase

from agent.service.errors import ToolValidationError, UnknownToolCall
from agent.tools.dispatch import dispatch_tool_call
from agent.tools.registry import ToolRegistry
from agent.types.context import RunContext
from agent.types.conversation import Conversation, ToolInvocation
from agent.types.messages import ToolCall
from chat_api.widgets import WIDGET_RENDERERS, render_conversation, render_invocation, submit_interaction
from datasources.registry import build_datasource_registry
from datasources.tools import build_data_toolset
from dcm.tools import build_dcm_toolset


def _pending(call_id, name, args=None):
    return ToolInvocation(tool_call_id=call_id, tool_name=name, args=args or {})


class RenderTestCase(SimpleTestCase):
    def setUp(self):
        super().setUp()
        self.data_tools = ToolRegistry()
        self.data_tools.register_tools(build_data_toolset(build_datasource_registry()))
        self.dcm_tools = ToolRegistry()
        self.dcm_tools.register_tools(build_dcm_toolset())

    def executed(self, registry, name, **args):
        outcome = dispatch_tool_call(registry, ToolCall(id=f"call_{name}", name=name, arguments=args), RunContext.create())
        return _pending(f"call_{name}", name, args).resolve(outcome.result)


class RenderInvocationTests(RenderTestCase):
    def test_every_tool_widget_has_a_renderer(self):
        for registry in (self.data_tools, self.dcm_tools):
            for tool in registry.list_tools():
                self.assertIn(tool.widget, WIDGET_RENDERERS, tool.name)

    def test_pending_server_tool_shows_progress(self):
        widget = render_invocation(_pending("c1", "query_data", {"dataSource": "employees"}), self.data_tools)
        self.assertEqual(widget.component, "ToolProgress")
        self.assertEqual(widget.props, {"label": "Querying employees..."})
        self.assertFalse(widget.interactive)
        self.assertEqual(widget.state, "call")

    def test_pending_client_tool_is_interactive(self):
        args = {"summary": "Export?", "risk": "medium", "actions": [{"id": "go", "label": "Go"}]}
        widget = render_invocation(_pending("c1", "confirm_action", args), self.data_tools)
        self.assertEqual(widget.component, "ApprovalCard")
        self.assertTrue(widget.interactive)
        self.assertEqual(widget.props["actions"], [{"id": "go", "label": "Go"}])

    def test_query_result_is_a_titled_table(self):
        widget = render_invocation(self.executed(self.data_tools, "query_data", dataSource="bond_trades"), self.data_tools)
        self.assertEqual(widget.component, "TableCard")
        self.assertEqual(widget.props["title"], "Bond Trades Results")
        self.assertTrue(widget.props["footer"].startswith("Showing "))

    def test_chart_result(self):
        widget = render_invocation(
            self.executed(
                self.data_tools, "show_chart", title="Headcount", type="bar", aggregation="employees:byDepartment"
            ),
            self.data_tools,
        )
        self.assertEqual(widget.component, "ChartCard")
        self.assertEqual(widget.props["title"], "Headcount")

    def test_error_result(self):
        widget = render_invocation(self.executed(self.dcm_tools, "get_issuer_deals", issuerId="acme"), self.dcm_tools)
        self.assertEqual(widget.component, "ToolError")
        self.assertEqual(widget.props, {"message": "Issuer not found: acme"})

    def test_dcm_results(self):
        cases = {
            "EntityPicker": ("resolve_entity", {"query": "BMW"}),
            "IssuerTimeline": ("get_issuer_deals", {"issuerId": "bmw-ag"}),
            "ComparableDealsPanel": ("get_peer_comparison", {"issuerId": "bmw-ag"}),
            "AllocationBreakdown": ("get_allocations", {"dealId": "deal-bmw-001"}),
            "SecondaryPerformanceView": ("get_performance", {"isin": "XS2725478901"}),
            "ParticipationHistory": ("get_participation_history", {"issuerId": "bmw-ag"}),
            "ExportPanel": ("generate_mandate_brief", {"issuerId": "bmw-ag"}),
            "MarketIssuance": ("get_market_deals", {}),
            "ChartCard": ("get_sector_curve", {"sector": "Energy", "rating": "BBB"}),
            "InvestorList": ("get_top_investors_for_issuer", {"issuerId": "bmw-ag"}),
        }
        for component, (name, args) in cases.items():
            with self.subTest(component=component):
                widget = render_invocation(self.executed(self.dcm_tools, name, **args), self.dcm_tools)
                self.assertEqual(widget.component, component)

    def test_entity_candidates(self):
        widget = render_invocation(self.executed(self.dcm_tools, "resolve_entity", query="BMW"), self.dcm_tools)
        self.assertEqual(widget.props["candidates"][0]["name"], "BMW AG")

    def test_investor_list_renders_both_shapes(self):
        ranked = render_invocation(
            self.executed(self.dcm_tools, "get_top_investors_for_issuer", issuerId="bmw-ag", limit=3), self.dcm_tools
        )
        self.assertTrue(ranked.props["ranked"])
        self.assertEqual(len(ranked.props["investors"]), 3)

        listed = render_invocation(self.executed(self.dcm_tools, "get_investor_list", type="Hedge Fund"), self.dcm_tools)
        self.assertFalse(listed.props["ranked"])
        self.assertEqual(listed.props["total"], 2)

    def test_malformed_result_falls_back_to_generic(self):
        invocation = _pending("c1", "get_allocations", {"dealId": "x"}).resolve({"unexpected": 1})
        with self.assertLogs("chat_api.widgets", level="WARNING"):
            widget = render_invocation(invocation, self.dcm_tools)
        self.assertEqual(widget.component, "GenericResult")
        self.assertEqual(widget.props["result"], {"unexpected": 1})

    def test_unknown_tool(self):
        widget = render_invocation(_pending("c1", "teleport"), self.dcm_tools)
        self.assertEqual(widget.component, "UnknownTool")
        self.assertEqual(widget.props, {"toolName": "teleport", "state": "call"})

    def test_to_dict_uses_wire_names(self):
        data = render_invocation(_pending("c1", "teleport"), self.dcm_tools).to_dict()
        self.assertEqual(data["toolCallId"], "c1")
        self.assertEqual(data["toolName"], "teleport")


class SubmitInteractionTests(RenderTestCase):
    def setUp(self):
        super().setUp()
        self.conversation = Conversation.model_validate({
            "messages": [
                {"role": "user", "content": "Filter trades"},
                {
                    "role": "assistant",
                    "parts": [{
                        "type": "tool-invocation",
                        "toolInvocation": {
                            "toolCallId": "c1",
                            "toolName": "collect_filters",
                            "state": "call",
                            "args": {"title": "Filters", "fields": [{"key": "currency", "label": "Currency", "type": "text"}]},
                        },
                    }],
                },
            ]
        })

    def test_submit_then_resubmit_is_noop(self):
        self.assertTrue(submit_interaction(self.conversation, "c1", {"values": {"currency": "EUR"}}, self.data_tools))
        self.assertFalse(submit_interaction(self.conversation, "c1", {"values": {"currency": "USD"}}, self.data_tools))
        invocation = self.conversation.find_invocation("c1")
        self.assertEqual(invocation.result, {"values": {"currency": "EUR"}})

        widgets = render_conversation(self.conversation, self.data_tools)
        self.assertEqual(widgets[0].component, "FilterForm")
        self.assertFalse(widgets[0].interactive)
        self.assertEqual(widgets[0].props["submitted"], {"currency": "EUR"})

    def test_invalid_payload_rejected(self):
        with self.assertRaises(ToolValidationError):
            submit_interaction(self.conversation, "c1", {"values": "EUR"}, self.data_tools)
        self.assertFalse(self.conversation.find_invocation("c1").is_resolved)

    def test_unknown_call(self):
        with self.assertRaises(UnknownToolCall):
            submit_interaction(self.conversation, "zz", {"values": {}}, self.data_tools)


class ApprovalSubmissionTests(RenderTestCase):
    def setUp(self):
        super().setUp()
        self.conversation = Conversation.model_validate({
            "messages": [{
                "role": "assistant",
                "parts": [{
                    "type": "tool-invocation",
                    "toolInvocation": {
                        "toolCallId": "c2",
                        "toolName": "confirm_action",
                        "state": "call",
                        "args": {
                            "summary": "Export the brief?",
                            "risk": "low",
                            "actions": [{"id": "pdf", "label": "PDF"}, {"id": "xlsx", "label": "Excel"}],
                        },
                    },
                }],
            }]
        })

    def test_offered_action_is_recorded(self):
        self.assertTrue(submit_interaction(self.conversation, "c2", {"approvedActionId": "xlsx"}, self.dcm_tools))
        self.assertEqual(
            self.conversation.find_invocation("c2").result, {"approvedActionId": "xlsx", "cancelled": False}
        )

    def test_action_not_offered_is_rejected(self):
        with self.assertRaises(ToolValidationError):
            submit_interaction(self.conversation, "c2", {"approvedActionId": "delete-everything"}, self.dcm_tools)
        self.assertFalse(self.conversation.find_invocation("c2").is_resolved)

    def test_cancel_needs_no_action(self):
        self.assertTrue(submit_interaction(self.conversation, "c2", {"cancelled": True}, self.dcm_tools))
        self.assertEqual(self.conversation.find_invocation("c2").result, {"cancelled": True})
