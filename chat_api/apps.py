from django.apps import AppConfig


class ChatApiConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "chat_api"
    verbose_name = "Chat API"

    def ready(self) -> None:
        from .bootstrap import bootstrap

        bootstrap()
