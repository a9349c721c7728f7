"""Tests for data stream framing and client-side accumulation."""

from django.test import SimpleTestCase

from agent.types.conversation import StepStartPart, TextPart, ToolInvocationPart
from agent.types.streaming import StreamEvent
from chat_api.protocol import (
    DATA_STREAM_HEADERS,
    StreamAccumulator,
    encode_error,
    encode_event,
    iter_frames,
    parse_frame,
)


def _event(kind, **data):
    return StreamEvent(event_type=kind, data=data, sequence=1, run_id="r")


class EncodeTests(SimpleTestCase):
    def test_headers(self):
        self.assertEqual(DATA_STREAM_HEADERS["X-Vercel-AI-Data-Stream"], "v1")
        self.assertEqual(DATA_STREAM_HEADERS["Content-Type"], "text/plain; charset=utf-8")

    def test_frames(self):
        self.assertEqual(encode_event(_event("step_start", message_id="msg-1", step=0)), 'f:{"messageId":"msg-1"}\n')
        self.assertEqual(encode_event(_event("token", text='Hi "there"')), '0:"Hi \\"there\\""\n')
        self.assertEqual(
            encode_event(_event("tool_start", tool_call_id="c1", tool_name="query_data", arguments={"dataSource": "employees"})),
            '9:{"toolCallId":"c1","toolName":"query_data","args":{"dataSource":"employees"}}\n',
        )
        self.assertEqual(
            encode_event(_event("tool_end", tool_call_id="c1", tool_name="query_data", result={"ok": True})),
            'a:{"toolCallId":"c1","result":{"ok":true}}\n',
        )
        self.assertEqual(
            encode_event(_event("meta", type="truncated", max_steps=3)), '2:[{"type":"truncated","maxSteps":3}]\n'
        )
        self.assertEqual(encode_event(_event("error", message="boom")), '3:"boom"\n')
        self.assertEqual(
            encode_event(_event("step_end", finish_reason="tool-calls", usage=None, is_continued=False)),
            'e:{"finishReason":"tool-calls","usage":{"promptTokens":0,"completionTokens":0},"isContinued":false}\n',
        )
        self.assertEqual(
            encode_event(_event("message_end", finish_reason="stop", usage={"prompt_tokens": 5, "completion_tokens": 2})),
            'd:{"finishReason":"stop","usage":{"promptTokens":5,"completionTokens":2}}\n',
        )

    def test_message_start_has_no_frame(self):
        self.assertIsNone(encode_event(_event("message_start", model="x")))

    def test_encode_error(self):
        self.assertEqual(encode_error("Failed"), '3:"Failed"\n')


class ParseTests(SimpleTestCase):
    def test_parse_frame(self):
        frame = parse_frame('9:{"toolCallId":"c1","toolName":"x","args":{}}\n')
        self.assertEqual(frame.code, "9")
        self.assertEqual(frame.event_type, "tool_start")
        self.assertEqual(frame.value["toolCallId"], "c1")

    def test_malformed(self):
        with self.assertRaises(ValueError):
            parse_frame("no colon")
        with self.assertRaises(ValueError):
            parse_frame("0:{not json")

    def test_iter_frames_across_chunk_boundaries(self):
        chunks = [b'0:"Hel', b'lo"\n0:" wor', 'ld"\n', b'd:{"finishReason":"stop"}']
        frames = list(iter_frames(chunks))
        self.assertEqual([f.value for f in frames[:2]], ["Hello", " world"])
        self.assertEqual(frames[-1].event_type, "message_end")


class AccumulatorTests(SimpleTestCase):
    def test_folds_a_two_step_turn(self):
        events = [
            _event("message_start", model="x"),
            _event("step_start", message_id="msg-1", step=0),
            _event("tool_start", tool_call_id="c1", tool_name="query_data", arguments={"dataSource": "employees"}),
            _event("tool_end", tool_call_id="c1", tool_name="query_data", result={"rows": []}),
            _event("step_end", finish_reason="tool-calls", usage=None, is_continued=False),
            _event("step_start", message_id="msg-1", step=1),
            _event("token", text="No "),
            _event("token", text="rows."),
            _event("step_end", finish_reason="stop", usage=None, is_continued=False),
            _event("message_end", finish_reason="stop", usage=None),
        ]
        wire = "".join(filter(None, (encode_event(e) for e in events)))
        accumulator = StreamAccumulator()
        message = accumulator.feed_all(iter_frames([wire]))

        self.assertEqual(message.id, "msg-1")
        self.assertEqual(message.content, "No rows.")
        self.assertEqual(accumulator.finish_reason, "stop")
        kinds = [type(p) for p in message.parts]
        self.assertEqual(kinds, [StepStartPart, ToolInvocationPart, StepStartPart, TextPart])
        invocation = message.invocations()[0]
        self.assertTrue(invocation.is_resolved)
        self.assertEqual(invocation.step, 0)
        self.assertEqual(invocation.result, {"rows": []})

    def test_pending_client_tool_and_truncation(self):
        wire = (
            'f:{"messageId":"m"}\n'
            '9:{"toolCallId":"c2","toolName":"confirm_action","args":{"summary":"Go?"}}\n'
            '2:[{"type":"truncated","maxSteps":3}]\n'
            '3:"Something failed"\n'
        )
        accumulator = StreamAccumulator()
        accumulator.feed_all(iter_frames([wire]))
        self.assertEqual([i.tool_call_id for i in accumulator.pending_invocations], ["c2"])
        self.assertEqual(accumulator.annotations, [{"type": "truncated", "maxSteps": 3}])
        self.assertEqual(accumulator.errors, ["Something failed"])

    def test_result_for_unknown_call_is_rejected(self):
        with self.assertRaises(ValueError):
            StreamAccumulator().feed(parse_frame('a:{"toolCallId":"zz","result":{}}'))
