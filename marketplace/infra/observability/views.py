from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_GET
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest


@require_GET
def prometheus_metrics(request):
    """
    Exposes Prometheus metrics for the marketplace engine.
    """
    return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)


@require_GET
def health_check(request):
    return JsonResponse({"status": "ok"})
