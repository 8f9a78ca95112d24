from django.apps import AppConfig
from django.conf import settings


class MarketplaceConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "marketplace"

    def ready(self):
        from marketplace.infra.observability.tracing import setup_tracing

        engine_settings = getattr(settings, "MARKETPLACE", {})
        setup_tracing(
            service_name=engine_settings.get("SERVICE_NAME", "marketplace-engine"),
            enable=engine_settings.get("TRACING_ENABLED", False),
        )
