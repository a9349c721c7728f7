from django.apps import AppConfig


class DcmConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "dcm"
    verbose_name = "Debt Capital Markets"
