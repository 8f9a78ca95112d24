"""
URL configuration for foodmarketBackend project.

The engine has no public HTTP surface of its own; only operational endpoints
are routed here.
"""

from django.urls import path

from marketplace.infra.observability.views import health_check, prometheus_metrics

urlpatterns = [
    path("health/", health_check, name="health"),
    path("metrics/", prometheus_metrics, name="prometheus-metrics"),
]
