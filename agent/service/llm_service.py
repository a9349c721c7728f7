"""
LLMService: facade for running and streaming agent pipelines.

Use from views and consumers:

    from agent import get_llm_service
    from agent.types import ChatRequest, Message, RunContext

    service = get_llm_service()
    request = ChatRequest(
        messages=[Message(role="user", content="Show engineers in Austin")],
        model=None,  # use DEFAULT_LLM_MODEL
        context=RunContext.create(),
    )
    response = service.run("data_assistant", request)

For streaming from async code:

    async for event in service.astream("data_assistant", request):
        ...
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import AsyncIterator, Callable, Iterator, Optional

from agent import conf
from agent.pipelines.base import BasePipeline
from agent.pipelines.registry import PipelineRegistry, get_pipeline_registry
from agent.service.errors import LLMError, LLMPolicyDenied, LLMProviderError
from agent.service.logger import log_call, log_error, log_start, log_stream
from agent.service.policies import resolve_model
from agent.types.context import RunContext
from agent.types.requests import ChatRequest
from agent.types.responses import ChatResponse
from agent.types.streaming import StreamEvent

logger = logging.getLogger(__name__)


class LLMService:
    """Facade that routes pipeline calls, enforces policies, and normalizes errors.

    Accepts optional dependency overrides for testability. When omitted the
    process-wide singletons are used.
    """

    def __init__(
        self,
        pipeline_registry: PipelineRegistry | None = None,
        resolve_model_fn: Callable[[str | None], str] | None = None,
        max_concurrent_streams: int | None = None,
    ) -> None:
        self._pipeline_registry = pipeline_registry
        self._resolve_model_fn = resolve_model_fn
        self._max_concurrent_streams = max_concurrent_streams
        self._stream_semaphore: Optional[asyncio.Semaphore] = None

    # -- private accessors --------------------------------------------------

    def _get_pipeline_registry(self) -> PipelineRegistry:
        return self._pipeline_registry or get_pipeline_registry()

    def _resolve_model(self, model: str | None) -> str:
        fn = self._resolve_model_fn or resolve_model
        return fn(model)

    def has_pipeline(self, pipeline_id: str) -> bool:
        return self._get_pipeline_registry().has_pipeline(pipeline_id)

    def pipeline(self, pipeline_id: str) -> BasePipeline:
        return self._get_pipeline_registry().get_pipeline(pipeline_id)

    # -- sync API -----------------------------------------------------------

    def run(self, pipeline_id: str, request: ChatRequest) -> ChatResponse:
        """Run a pipeline to completion. Ensures context and model are set; delegates to pipeline."""
        self._ensure_context(request)
        request.model = self._resolve_model(request.model)
        pipeline = self._get_pipeline_registry().get_pipeline(pipeline_id)
        log_start(request, pipeline_id, is_stream=False)
        t0 = time.monotonic()
        try:
            response = pipeline.run(request)
            log_call(request, response, int((time.monotonic() - t0) * 1000))
            return response
        except LLMError as exc:
            log_error(request, exc, int((time.monotonic() - t0) * 1000))
            raise
        except Exception as exc:
            log_error(request, exc, int((time.monotonic() - t0) * 1000))
            raise LLMProviderError(f"Pipeline {pipeline_id} run failed") from exc

    def stream(self, pipeline_id: str, request: ChatRequest) -> Iterator[StreamEvent]:
        """Stream events from a pipeline. Ensures context and model; validates streaming capability."""
        self._ensure_context(request)
        request.model = self._resolve_model(request.model)
        pipeline = self._get_pipeline_registry().get_pipeline(pipeline_id)
        if not pipeline.capabilities.get("streaming", False):
            raise LLMPolicyDenied(f"Pipeline {pipeline_id} does not support streaming")
        log_start(request, pipeline_id, is_stream=True)
        t0 = time.monotonic()
        events: list[StreamEvent] = []
        try:
            for event in pipeline.stream(request):
                events.append(event)
                yield event
            log_stream(request, events, int((time.monotonic() - t0) * 1000))
        except GeneratorExit:
            logger.info(
                "Stream closed by consumer run_id=%s after %d events",
                request.context.run_id,
                len(events),
            )
            raise
        except LLMError as exc:
            log_error(request, exc, int((time.monotonic() - t0) * 1000), is_stream=True)
            raise
        except Exception as exc:
            log_error(request, exc, int((time.monotonic() - t0) * 1000), is_stream=True)
            raise LLMProviderError(f"Pipeline {pipeline_id} stream failed") from exc

    # -- async bridge -------------------------------------------------------

    _STREAM_SENTINEL = None  # sentinel to signal end of stream

    async def astream(
        self, pipeline_id: str, request: ChatRequest
    ) -> AsyncIterator[StreamEvent]:
        """Async wrapper around ``stream()`` with token-level streaming.

        A background thread runs the sync ``stream()`` generator, pushing each
        event into an ``asyncio.Queue`` so the async caller receives events as
        they arrive rather than waiting for the full response.

        If the caller stops iterating (client disconnect, task cancelled), the
        request's RunContext is cancelled and the worker stops pulling from the
        pipeline, so no further tool executors are started.

        Concurrent streams are capped by ``LLM_MAX_CONCURRENT_STREAMS``.
        """
        self._ensure_context(request)
        context = request.context
        sem = self._get_stream_semaphore()
        async with sem:
            loop = asyncio.get_running_loop()
            q: asyncio.Queue[StreamEvent | BaseException | None] = asyncio.Queue()

            def _put(item) -> bool:
                try:
                    loop.call_soon_threadsafe(q.put_nowait, item)
                except RuntimeError:  # event loop closed under us
                    return False
                return True

            def _produce() -> None:
                events = self.stream(pipeline_id, request)
                try:
                    for event in events:
                        if not _put(event) or context.is_cancelled():
                            return
                    _put(self._STREAM_SENTINEL)
                except BaseException as exc:
                    _put(exc)
                finally:
                    events.close()

            thread = threading.Thread(target=_produce, daemon=True)
            thread.start()

            try:
                while True:
                    item = await q.get()
                    if item is self._STREAM_SENTINEL:
                        break
                    if isinstance(item, BaseException):
                        raise item
                    yield item
            finally:
                if thread.is_alive():
                    context.cancel()

    def _get_stream_semaphore(self) -> asyncio.Semaphore:
        """Lazy-init the semaphore inside a running event loop."""
        if self._stream_semaphore is None:
            limit = self._max_concurrent_streams or conf.get_max_concurrent_streams()
            self._stream_semaphore = asyncio.Semaphore(limit)
        return self._stream_semaphore

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _ensure_context(request: ChatRequest) -> None:
        if request.context is None:
            request.context = RunContext.create()


_global_service: LLMService | None = None
_global_service_lock = threading.Lock()


def get_llm_service() -> LLMService:
    """Return the process-wide LLMService singleton (thread-safe)."""
    global _global_service
    if _global_service is None:
        with _global_service_lock:
            if _global_service is None:
                _global_service = LLMService()
    return _global_service


__all__ = ["LLMService", "get_llm_service"]
