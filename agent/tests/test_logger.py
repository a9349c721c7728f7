"""Tests for the call logger and stream assembly."""

from django.test import SimpleTestCase

from agent.service.logger import assemble_stream_response, log_error, log_start, log_stream, pair_tool_events
from agent.types.context import RunContext
from agent.types.messages import Message
from agent.types.requests import ChatRequest
from agent.types.streaming import StreamEvent


def _events(*specs):
    return [
        StreamEvent(event_type=kind, data=data, sequence=i + 1, run_id="run-1")
        for i, (kind, data) in enumerate(specs)
    ]


class AssembleTests(SimpleTestCase):
    def test_pairs_tool_events_by_call_id(self):
        events = _events(
            ("tool_start", {"tool_call_id": "a", "tool_name": "query_data", "arguments": {"dataSource": "x"}}),
            ("tool_start", {"tool_call_id": "b", "tool_name": "confirm_action", "arguments": {}}),
            ("tool_end", {"tool_call_id": "a", "tool_name": "query_data", "result": {"rows": []}}),
        )
        pairs = pair_tool_events(events)
        self.assertEqual([p["tool_call_id"] for p in pairs], ["a", "b"])
        self.assertEqual(pairs[0]["result"], {"rows": []})
        self.assertIsNone(pairs[1]["result"])

    def test_assemble_text_usage_and_finish(self):
        events = _events(
            ("token", {"text": "Hello "}),
            ("step_end", {"usage": {"prompt_tokens": 1, "completion_tokens": 2, "total_tokens": 3}}),
            ("token", {"text": "world"}),
            ("step_end", {"usage": {"prompt_tokens": 4, "completion_tokens": 5, "total_tokens": 9}}),
            ("message_end", {"finish_reason": "stop"}),
        )
        response = assemble_stream_response(events, model="fake/x")
        self.assertEqual(response.message.content, "Hello world")
        self.assertEqual(response.usage.total_tokens, 12)
        self.assertEqual(response.finish_reason, "stop")
        self.assertIsNone(response.message.tool_calls)

    def test_error_event_sets_finish_reason(self):
        response = assemble_stream_response(_events(("error", {"message": "bad"})))
        self.assertEqual(response.finish_reason, "error")
        self.assertEqual(response.metadata["errors"], ["bad"])


class LogRecordTests(SimpleTestCase):
    def setUp(self):
        super().setUp()
        self.request = ChatRequest(
            messages=[Message(role="user", content="hi")],
            model="fake/x",
            context=RunContext.create(conversation_id="msg-1"),
        )

    def test_start_record(self):
        with self.assertLogs("agent.service.logger", level="INFO") as logs:
            log_start(self.request, "data_assistant", is_stream=True)
        self.assertIn("pipeline=data_assistant", logs.output[0])
        self.assertIn(self.request.context.run_id, logs.output[0])
        self.assertIn("conversation=msg-1", logs.output[0])

    def test_truncated_stream_logs_warning(self):
        events = _events(("meta", {"type": "truncated", "max_steps": 3}), ("message_end", {"finish_reason": "length"}))
        with self.assertLogs("agent.service.logger", level="WARNING") as logs:
            log_stream(self.request, events, 10)
        self.assertIn("termination=step_ceiling", logs.output[0])

    def test_error_record_names_exception_type(self):
        with self.assertLogs("agent.service.logger", level="ERROR") as logs:
            log_error(self.request, ValueError("nope"), 5)
        self.assertIn("error_type=ValueError", logs.output[0])
