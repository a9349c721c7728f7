import hmac
import json
import logging

from django.conf import settings
from django.http import JsonResponse, StreamingHttpResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .protocol import DATA_STREAM_HEADERS
from .relay import InvalidChatRequest, build_chat_request, relay_frames

logger = logging.getLogger(__name__)


def _json_body(request):
    try:
        payload = json.loads(request.body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return payload if isinstance(payload, dict) else None


@method_decorator(csrf_exempt, name="dispatch")
class ChatStreamView(View):
    """POST a conversation, receive the assistant turn as a data stream.

    Validation errors are answered with JSON before streaming starts; once
    the stream is open every failure arrives as an error frame.
    """

    pipeline_id = ""
    http_method_names = ["post"]

    async def post(self, request, *args, **kwargs):
        payload = _json_body(request)
        if payload is None:
            return JsonResponse({"error": "Request body must be a JSON object"}, status=400)
        try:
            chat_request = build_chat_request(self.pipeline_id, payload)
        except InvalidChatRequest as e:
            logger.info("Rejected chat request for %s: %s", self.pipeline_id, e)
            return JsonResponse({"error": str(e)}, status=e.status)

        return StreamingHttpResponse(
            relay_frames(self.pipeline_id, chat_request),
            headers=dict(DATA_STREAM_HEADERS),
        )


@csrf_exempt
@require_POST
def auth_verify(request):
    """Check the shared demo password. With no APP_PASSWORD configured access is open."""
    expected = getattr(settings, "APP_PASSWORD", "") or ""
    if not expected:
        return JsonResponse({"success": True})
    password = (_json_body(request) or {}).get("password")
    if isinstance(password, str) and hmac.compare_digest(password.encode(), expected.encode()):
        return JsonResponse({"success": True})
    return JsonResponse({"success": False, "error": "Invalid password"}, status=401)
