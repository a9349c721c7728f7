from django.urls import path

from . import views

urlpatterns = [
    path("deals", views.deals_view, name="dashboard_deals"),
    path("allocations", views.allocations_view, name="dashboard_allocations"),
    path("secondary", views.secondary_view, name="dashboard_secondary"),
]
