"""WebSocket transport for the chat assistants, framed like the HTTP stream."""

from __future__ import annotations

import asyncio
import json
import logging

from channels.generic.websocket import AsyncJsonWebsocketConsumer

from agent import get_llm_service

from .relay import InvalidChatRequest, build_chat_request, relay_frames

logger = logging.getLogger(__name__)


class ChatStreamConsumer(AsyncJsonWebsocketConsumer):
    """One socket per assistant; each ``{"messages": [...]}`` starts a run.

    Frames are sent as ``{"type": "frame", "frame": "<code>:<json>"}``,
    followed by ``{"type": "done"}``. Closing the socket cancels the run.
    """

    async def connect(self):
        self.pipeline_id = self.scope["url_route"]["kwargs"]["pipeline_id"]
        self.relay_task = None
        self.chat_request = None

        if not get_llm_service().has_pipeline(self.pipeline_id):
            await self.close(code=4404)
            return
        await self.accept()

    async def disconnect(self, close_code):
        if self.chat_request is not None:
            self.chat_request.context.cancel()
        if self.relay_task is not None and not self.relay_task.done():
            self.relay_task.cancel()

    async def receive(self, text_data=None, bytes_data=None, **kwargs):
        try:
            await super().receive(text_data=text_data, bytes_data=bytes_data, **kwargs)
        except json.JSONDecodeError:
            await self.send_json({"type": "error", "error": "Invalid JSON"})

    async def receive_json(self, content, **kwargs):
        if self.relay_task is not None and not self.relay_task.done():
            await self.send_json({"type": "error", "error": "A response is already streaming"})
            return
        try:
            chat_request = build_chat_request(self.pipeline_id, content)
        except InvalidChatRequest as e:
            await self.send_json({"type": "error", "error": str(e)})
            return

        self.chat_request = chat_request
        self.relay_task = asyncio.create_task(self._relay(chat_request))

    async def _relay(self, chat_request):
        async for frame in relay_frames(self.pipeline_id, chat_request):
            await self.send_json({"type": "frame", "frame": frame.rstrip("\n")})
        await self.send_json({"type": "done"})
