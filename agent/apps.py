import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class AgentConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "agent"
    verbose_name = "Agent"

    def ready(self) -> None:
        from .core.providers import register_default_providers
        from .core.registry import get_model_registry

        register_default_providers(get_model_registry())
        logger.debug("Registered model providers: %s", get_model_registry().prefixes())
