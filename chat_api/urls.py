from django.urls import path

from . import views
from .bootstrap import DATA_ASSISTANT, DCM_ASSISTANT

urlpatterns = [
    path("api/chat", views.ChatStreamView.as_view(pipeline_id=DATA_ASSISTANT), name="data_chat"),
    path("api/dcm/chat", views.ChatStreamView.as_view(pipeline_id=DCM_ASSISTANT), name="dcm_chat"),
    path("api/auth/verify", views.auth_verify, name="auth_verify"),
]
