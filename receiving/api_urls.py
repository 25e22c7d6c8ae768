from django.urls import path

from . import views

urlpatterns = [
    path("quotas/", views.grant_quota, name="reception-grant-quota"),
    path("arrivals/", views.register_arrival, name="reception-arrival"),
    path("quality/", views.submit_quality, name="reception-quality"),
    path("weighings/gross/", views.record_gross, name="reception-gross"),
    path("weighings/gross/correction/", views.correct_gross, name="reception-gross-correction"),
    path("weighings/tare/", views.record_tare, name="reception-tare"),
    path("queues/<str:stage>/", views.work_queue, name="reception-queue"),
    path("reports/", views.report, name="reception-report"),
    path("silos/utilization/", views.silo_utilization, name="reception-silo-utilization"),
    path("catalog/products/", views.catalog_products, name="reception-products"),
    path("catalog/parameters/", views.catalog_parameters, name="reception-parameters"),
    path("catalog/thresholds/", views.catalog_thresholds, name="reception-thresholds"),
    path("catalog/silos/", views.catalog_silos, name="reception-silos"),
    path("catalog/silos/<str:code>/", views.delete_silo, name="reception-silo-delete"),
]
