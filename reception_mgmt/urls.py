# reception_mgmt/urls.py
from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include


def healthz(request):
    return JsonResponse({"status": "ok"})


urlpatterns = [
    path('admin/', admin.site.urls),
    # Reception API (quotas, arrivals, quality, weighbridge, reports)
    path('api/reception/', include('receiving.api_urls')),
    path("healthz/", healthz),
]
