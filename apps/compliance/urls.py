# apps/compliance/urls.py
from django.urls import path

from . import views

urlpatterns = [
    path("compliance-runs/", views.RunListView.as_view(), name="compliance-run-list"),
    path("compliance-runs/<uuid:run_id>/", views.RunDetailView.as_view(), name="compliance-run-detail"),
    path("compliance-runs/<uuid:run_id>/respond/", views.RunRespondView.as_view(), name="compliance-run-respond"),
    path("compliance-runs/<uuid:run_id>/submit/", views.RunSubmitView.as_view(), name="compliance-run-submit"),
    path("compliance-actions/", views.ActionListView.as_view(), name="compliance-action-list"),
    path("compliance-actions/<uuid:action_id>/", views.ActionDetailView.as_view(), name="compliance-action-detail"),
    path(
        "compliance-actions/<uuid:action_id>/close/",
        views.ActionCloseView.as_view(),
        name="compliance-action-close",
    ),
]
