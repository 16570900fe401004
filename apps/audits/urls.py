# apps/audits/urls.py
from django.urls import path

from . import views

urlpatterns = [
    # Auditorías
    path("audits/", views.AuditCreateView.as_view(), name="audit-create"),
    path("audits/<uuid:audit_id>/", views.AuditDetailView.as_view(), name="audit-detail"),
    path("audits/<uuid:audit_id>/scope/", views.AuditScopeView.as_view(), name="audit-scope"),
    path("audits/<uuid:audit_id>/template/", views.AuditTemplateView.as_view(), name="audit-template"),
    path("audits/<uuid:audit_id>/start/", views.AuditStartView.as_view(), name="audit-start"),
    path(
        "audits/<uuid:audit_id>/responses/<uuid:indicator_id>/",
        views.AuditResponseView.as_view(),
        name="audit-response",
    ),
    path(
        "audits/<uuid:audit_id>/in-review/responses/",
        views.AuditInReviewResponseView.as_view(),
        name="audit-in-review-response",
    ),
    path("audits/<uuid:audit_id>/submit/", views.AuditSubmitView.as_view(), name="audit-submit"),
    path("audits/<uuid:audit_id>/close/", views.AuditCloseView.as_view(), name="audit-close"),
    path("audits/<uuid:audit_id>/summary/", views.AuditSummaryView.as_view(), name="audit-summary"),
    path(
        "audits/<uuid:audit_id>/request-evidence/",
        views.AuditEvidenceRequestView.as_view(),
        name="audit-request-evidence",
    ),

    # Hallazgos
    path("findings/", views.FindingListView.as_view(), name="finding-list"),
    path("findings/<uuid:finding_id>/", views.FindingDetailView.as_view(), name="finding-detail"),
    path("findings/<uuid:finding_id>/evidence/", views.FindingEvidenceView.as_view(), name="finding-evidence"),
    path(
        "findings/<uuid:finding_id>/request-evidence/",
        views.FindingEvidenceRequestView.as_view(),
        name="finding-request-evidence",
    ),

    # Evidencia
    path("evidence/requests/", views.EvidenceRequestListView.as_view(), name="evidence-request-list"),
    path("evidence/requests/<uuid:request_id>/", views.EvidenceRequestDetailView.as_view(), name="evidence-request-detail"),
    path("evidence/requests/<uuid:request_id>/submit/", views.EvidenceSubmitView.as_view(), name="evidence-submit"),
    path(
        "evidence/requests/<uuid:request_id>/start-review/",
        views.EvidenceStartReviewView.as_view(),
        name="evidence-start-review",
    ),
    path("evidence/requests/<uuid:request_id>/review/", views.EvidenceReviewView.as_view(), name="evidence-review"),

    # Checklist documental
    path("document-checklists/<str:document_type>/", views.DocumentChecklistView.as_view(), name="document-checklist"),
    path("document-reviews/", views.DocumentReviewCreateView.as_view(), name="document-review-create"),
    path(
        "document-reviews/<uuid:evidence_item_id>/",
        views.DocumentReviewDetailView.as_view(),
        name="document-review-detail",
    ),
]
