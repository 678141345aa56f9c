from django.urls import path

from .views import InventoryReportView, InventoryStatisticsView, MovementDetailView, MovementListCreateView

urlpatterns = [
    path("movements/", MovementListCreateView.as_view(), name="movement-list"),
    path("movements/<int:pk>/", MovementDetailView.as_view(), name="movement-detail"),
    path("report/", InventoryReportView.as_view(), name="inventory-report"),
    path("statistics/", InventoryStatisticsView.as_view(), name="inventory-statistics"),
]

# EOF
