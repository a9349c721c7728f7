from django.urls import re_path

from . import consumers


websocket_urlpatterns = [
    # e.g. ws://.../ws/chat/dcm_assistant/
    re_path(r"^ws/chat/(?P<pipeline_id>[a-z_]+)/$", consumers.ChatStreamConsumer.as_asgi()),
]
