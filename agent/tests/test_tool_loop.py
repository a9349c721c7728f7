"""Tests for the tool loop pipeline, driven by a scripted model."""

import json

from django.test import SimpleTestCase

from agent.pipelines.tool_loop import ToolLoopPipeline
from agent.tools.registry import ToolRegistry
from agent.types.context import RunContext
from agent.types.conversation import Conversation, to_model_messages
from agent.types.messages import Message
from agent.types.requests import ChatRequest
from datasources.registry import build_datasource_registry
from datasources.tools import build_data_toolset
from dcm.tools import build_dcm_toolset

from .utils import ScriptedChatModel, call, registry_for, turn


def _types(events):
    return [e.event_type for e in events]


class ToolLoopTestCase(SimpleTestCase):
    def pipeline(self, model, tools, max_steps=5):
        return ToolLoopPipeline(
            id="test",
            tool_registry=tools,
            system_prompt="You are a test assistant.",
            max_steps=max_steps,
            model_registry=registry_for(model),
        )

    def request(self, text="Hi", messages=None, context=None):
        return ChatRequest(
            messages=messages or [Message(role="user", content=text)],
            model="fake/scripted",
            context=context or RunContext.create(),
        )


class DataAssistantLoopTests(ToolLoopTestCase):
    def setUp(self):
        super().setUp()
        self.tools = ToolRegistry()
        self.tools.register_tools(build_data_toolset(build_datasource_registry()))

    def test_server_tool_result_feeds_next_turn(self):
        model = ScriptedChatModel([
            turn(tool_calls=[call(
                "call_1", "query_data", dataSource="employees", filtersJson='{"department":"Engineering"}'
            )]),
            turn("Here are the engineers."),
        ])
        events = list(self.pipeline(model, self.tools).stream(self.request("Show engineers")))

        self.assertEqual(
            _types(events),
            [
                "message_start",
                "step_start", "tool_start", "tool_end", "step_end",
                "step_start", "token", "step_end",
                "message_end",
            ],
        )
        tool_end = events[3]
        self.assertEqual(tool_end.data["tool_call_id"], "call_1")
        self.assertEqual(tool_end.data["result"]["dataSource"], "employees")
        self.assertTrue(all(r["Department"] == "Engineering" for r in tool_end.data["result"]["rows"]))
        self.assertEqual(events[-1].data["finish_reason"], "stop")

        second = model.requests[1].messages
        self.assertEqual(second[0].role, "system")
        self.assertEqual([m.role for m in second[-2:]], ["assistant", "tool"])
        self.assertEqual(second[-1].tool_call_id, "call_1")
        self.assertEqual(json.loads(second[-1].content)["dataSource"], "employees")

    def test_sequence_numbers_are_monotonic_and_share_run_id(self):
        model = ScriptedChatModel([turn("Hello")])
        request = self.request()
        events = list(self.pipeline(model, self.tools).stream(request))
        self.assertEqual([e.sequence for e in events], list(range(1, len(events) + 1)))
        self.assertEqual({e.run_id for e in events}, {request.context.run_id})

    def test_client_tool_suspends_the_turn(self):
        model = ScriptedChatModel([
            turn(tool_calls=[call(
                "call_c", "confirm_action", summary="Export the report?", risk="low",
                actions=[{"id": "export", "label": "Export"}],
            )]),
        ])
        events = list(self.pipeline(model, self.tools).stream(self.request("Export it")))

        self.assertEqual(
            _types(events), ["message_start", "step_start", "tool_start", "step_end", "message_end"]
        )
        self.assertEqual(events[-1].data["finish_reason"], "tool-calls")
        self.assertEqual(len(model.requests), 1)

    def test_resubmitted_approval_reaches_the_model(self):
        conversation = Conversation.model_validate({
            "messages": [
                {"id": "u1", "role": "user", "content": "Export it"},
                {
                    "id": "a1",
                    "role": "assistant",
                    "parts": [
                        {"type": "step-start"},
                        {
                            "type": "tool-invocation",
                            "toolInvocation": {
                                "toolCallId": "call_c",
                                "toolName": "confirm_action",
                                "state": "result",
                                "args": {"summary": "Export?", "risk": "low", "actions": []},
                                "result": {"approvedActionId": "export", "cancelled": False},
                            },
                        },
                    ],
                },
            ]
        })
        model = ScriptedChatModel([turn("Exporting now.")])
        messages = to_model_messages(conversation, self.tools)
        events = list(self.pipeline(model, self.tools).stream(self.request(messages=messages)))

        self.assertEqual(events[-1].data["finish_reason"], "stop")
        sent = model.requests[0].messages
        self.assertEqual(sent[-1].role, "tool")
        self.assertEqual(json.loads(sent[-1].content)["approvedActionId"], "export")

    def test_later_calls_after_client_tool_are_not_emitted(self):
        model = ScriptedChatModel([
            turn(tool_calls=[
                call("call_q", "query_data", dataSource="products"),
                call("call_f", "collect_filters", title="Narrow down", fields=[]),
                call("call_t", "show_table", title="T", columns=["a"], rowsJson="[]"),
            ]),
        ])
        events = list(self.pipeline(model, self.tools).stream(self.request()))

        starts = [e.data["tool_call_id"] for e in events if e.event_type == "tool_start"]
        ends = [e.data["tool_call_id"] for e in events if e.event_type == "tool_end"]
        self.assertEqual(starts, ["call_q", "call_f"])
        self.assertEqual(ends, ["call_q"])
        self.assertEqual(events[-1].data["finish_reason"], "tool-calls")

    def test_step_ceiling_truncates_the_run(self):
        model = ScriptedChatModel([
            turn(tool_calls=[call(f"call_{i}", "query_data", dataSource="employees")]) for i in range(10)
        ])
        events = list(self.pipeline(model, self.tools, max_steps=3).stream(self.request()))

        self.assertEqual(len(model.requests), 3)
        meta = [e for e in events if e.event_type == "meta"]
        self.assertEqual(len(meta), 1)
        self.assertEqual(meta[0].data, {"type": "truncated", "max_steps": 3})
        self.assertEqual(events[-1].event_type, "message_end")
        self.assertEqual(events[-1].data["finish_reason"], "length")

    def test_invalid_arguments_become_error_result(self):
        model = ScriptedChatModel([
            turn(tool_calls=[call("call_1", "query_data", dataSource="payroll")]),
            turn("That source does not exist."),
        ])
        events = list(self.pipeline(model, self.tools).stream(self.request()))
        tool_end = next(e for e in events if e.event_type == "tool_end")
        self.assertIn("Invalid arguments for query_data", tool_end.data["result"]["error"])
        self.assertEqual(events[-1].data["finish_reason"], "stop")

    def test_unknown_tool_becomes_error_result(self):
        model = ScriptedChatModel([turn(tool_calls=[call("call_1", "delete_everything")]), turn("Sorry.")])
        events = list(self.pipeline(model, self.tools).stream(self.request()))
        tool_end = next(e for e in events if e.event_type == "tool_end")
        self.assertEqual(tool_end.data["result"], {"error": "Unknown tool: delete_everything"})

    def test_model_failure_emits_single_error(self):
        model = ScriptedChatModel(["error"])
        events = list(self.pipeline(model, self.tools).stream(self.request()))
        self.assertEqual(_types(events), ["message_start", "step_start", "error"])
        self.assertEqual(events[-1].data["message"], "Fake streaming failure")

    def test_cancelled_run_starts_no_tools(self):
        model = ScriptedChatModel([turn(tool_calls=[call("call_1", "query_data", dataSource="employees")])])
        context = RunContext.create()
        context.cancel()
        events = list(self.pipeline(model, self.tools).stream(self.request(context=context)))
        self.assertNotIn("tool_start", _types(events))
        self.assertNotIn("message_end", _types(events))

    def test_usage_is_summed_across_steps(self):
        model = ScriptedChatModel([
            turn(
                tool_calls=[call("call_1", "query_data", dataSource="employees")],
                usage={"prompt_tokens": 10, "completion_tokens": 2, "total_tokens": 12},
            ),
            turn("ok", usage={"prompt_tokens": 20, "completion_tokens": 3, "total_tokens": 23}),
        ])
        events = list(self.pipeline(model, self.tools).stream(self.request()))
        self.assertEqual(
            events[-1].data["usage"], {"prompt_tokens": 30, "completion_tokens": 5, "total_tokens": 35}
        )

    def test_tool_schemas_are_bound(self):
        model = ScriptedChatModel([turn("hi")])
        list(self.pipeline(model, self.tools).stream(self.request()))
        names = [s["function"]["name"] for s in model.requests[0].tool_schemas]
        self.assertEqual(names, self.tools.names())

    def test_max_steps_must_be_positive(self):
        with self.assertRaises(ValueError):
            self.pipeline(ScriptedChatModel([]), self.tools, max_steps=0)


class DcmAssistantLoopTests(ToolLoopTestCase):
    def test_executor_error_is_reported_and_loop_continues(self):
        tools = ToolRegistry()
        tools.register_tools(build_dcm_toolset())
        model = ScriptedChatModel([
            turn(tool_calls=[call("call_1", "get_issuer_deals", issuerId="acme")]),
            turn("I could not find that issuer."),
        ])
        events = list(self.pipeline(model, tools).stream(self.request("Deals for acme")))

        tool_end = next(e for e in events if e.event_type == "tool_end")
        self.assertEqual(tool_end.data["result"], {"error": "Issuer not found: acme"})
        self.assertEqual(events[-1].data["finish_reason"], "stop")
        self.assertEqual(len(model.requests), 2)

    def test_run_assembles_response(self):
        tools = ToolRegistry()
        tools.register_tools(build_dcm_toolset())
        model = ScriptedChatModel([
            turn(tool_calls=[call("call_1", "resolve_entity", query="BMW")]),
            turn("BMW AG resolved."),
        ])
        response = self.pipeline(model, tools).run(self.request("BMW"))
        self.assertEqual(response.message.content, "BMW AG resolved.")
        self.assertEqual([tc.name for tc in response.message.tool_calls], ["resolve_entity"])
        self.assertEqual(response.metadata["tool_results"]["call_1"]["confidence"], "exact")
