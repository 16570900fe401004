# apps/audits/views.py
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.audits import evidence, reviews, services
from apps.audits.models import Audit, EvidenceRequest, Finding
from apps.audits.serializers import (
    AuditCreateSerializer, AuditDetailSerializer, AuditSerializer, CloseAuditSerializer,
    DocumentChecklistTemplateSerializer, DocumentReviewInputSerializer, DocumentReviewSerializer,
    EvidenceItemSerializer, EvidenceRequestCreateSerializer, EvidenceRequestFilterSerializer,
    EvidenceRequestSerializer, EvidenceReviewSerializer, EvidenceSubmitSerializer,
    FindingEvidenceRequestSerializer, FindingFilterSerializer, FindingSerializer, FindingUpdateSerializer,
    IndicatorResponseSerializer, InReviewRatingSerializer, RatingSerializer, ScopeSerializer,
    TemplateSelectSerializer,
)
from apps.core.errors import get_or_404
from apps.core.models import CompanyUser
from apps.core.services import actor_for_user


def _valid(serializer_class, request):
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _filters(serializer_class, request):
    serializer = serializer_class(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _outcome(outcome):
    return {
        "response": IndicatorResponseSerializer(outcome.response).data,
        "finding": FindingSerializer(outcome.finding).data if outcome.finding else None,
    }


# ==== Auditorías ====
class AuditCreateView(APIView):
    def post(self, request):
        actor = actor_for_user(request.user)
        data = _valid(AuditCreateSerializer, request)
        audit = services.create_audit(
            actor,
            data["audit_type"],
            data["title"],
            data["scope_time_from"],
            data["scope_time_to"],
            description=data["description"],
            external_auditor_name=data["external_auditor_name"],
            external_auditor_org=data["external_auditor_org"],
            external_auditor_email=data["external_auditor_email"],
        )
        return Response(AuditSerializer(audit).data, status=status.HTTP_201_CREATED)


class AuditDetailView(APIView):
    def get(self, request, audit_id):
        actor_for_user(request.user)
        audit = get_or_404(Audit.objects.prefetch_related("responses"), "Audit not found", pk=audit_id)
        return Response(AuditDetailSerializer(audit).data)


class AuditScopeView(APIView):
    def put(self, request, audit_id):
        actor = actor_for_user(request.user)
        data = _valid(ScopeSerializer, request)
        audit = services.update_scope(actor, audit_id, data["scope_time_from"], data["scope_time_to"])
        return Response(AuditSerializer(audit).data)


class AuditTemplateView(APIView):
    def put(self, request, audit_id):
        actor = actor_for_user(request.user)
        data = _valid(TemplateSelectSerializer, request)
        audit = services.select_template(actor, audit_id, data["template_id"])
        return Response(AuditSerializer(audit).data)


class AuditStartView(APIView):
    def post(self, request, audit_id):
        audit = services.start_audit(actor_for_user(request.user), audit_id)
        return Response(AuditSerializer(audit).data)


class AuditResponseView(APIView):
    def put(self, request, audit_id, indicator_id):
        actor = actor_for_user(request.user)
        data = _valid(RatingSerializer, request)
        outcome = services.record_response(actor, audit_id, indicator_id, data["rating"], data["comment"])
        return Response(_outcome(outcome))


class AuditInReviewResponseView(APIView):
    def post(self, request, audit_id):
        actor = actor_for_user(request.user)
        data = _valid(InReviewRatingSerializer, request)
        outcome = services.add_response_in_review(
            actor, audit_id, data["indicator_id"], data["rating"], data["comment"]
        )
        return Response(_outcome(outcome), status=status.HTTP_201_CREATED)


class AuditSubmitView(APIView):
    def post(self, request, audit_id):
        audit = services.submit_for_review(actor_for_user(request.user), audit_id)
        return Response(AuditSerializer(audit).data)


class AuditCloseView(APIView):
    def post(self, request, audit_id):
        actor = actor_for_user(request.user)
        data = _valid(CloseAuditSerializer, request)
        audit = services.close_audit(actor, audit_id, data["close_reason"])
        return Response(AuditSerializer(audit).data)


class AuditSummaryView(APIView):
    def get(self, request, audit_id):
        actor_for_user(request.user)
        return Response(services.audit_summary(audit_id))


class AuditEvidenceRequestView(APIView):
    def post(self, request, audit_id):
        actor = actor_for_user(request.user)
        data = _valid(EvidenceRequestCreateSerializer, request)
        evidence_request = evidence.request_evidence(
            actor,
            data["evidence_type"],
            data["request_note"],
            due_date=data["due_date"],
            audit_id=audit_id,
            indicator_id=data["indicator_id"],
        )
        return Response(EvidenceRequestSerializer(evidence_request).data, status=status.HTTP_201_CREATED)


# ==== Hallazgos ====
class FindingListView(APIView):
    def get(self, request):
        actor_for_user(request.user)
        findings = services.list_findings(**_filters(FindingFilterSerializer, request))
        return Response(FindingSerializer(findings, many=True).data)


class FindingDetailView(APIView):
    def get(self, request, finding_id):
        actor_for_user(request.user)
        finding = get_or_404(
            Finding.objects.select_related("audit", "indicator", "owner"), "Finding not found", pk=finding_id
        )
        return Response(FindingSerializer(finding).data)

    def patch(self, request, finding_id):
        actor = actor_for_user(request.user)
        serializer = FindingUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        changes = {}
        if "owner_id" in data:
            owner_id = data["owner_id"]
            changes["owner"] = (
                get_or_404(CompanyUser.objects.filter(is_active=True), "Owner not found", pk=owner_id)
                if owner_id else None
            )
        if "due_date" in data:
            changes["due_date"] = data["due_date"]
        if "status" in data:
            changes["status"] = data["status"]
            changes["closure_note"] = data.get("closure_note", "")
        finding = services.update_finding(actor, finding_id, **changes)
        return Response(FindingSerializer(finding).data)


class FindingEvidenceView(APIView):
    def get(self, request, finding_id):
        actor_for_user(request.user)
        evidence_request = evidence.evidence_for_finding(finding_id)
        if evidence_request is None:
            return Response({"evidence_request": None, "items": []})
        return Response({
            "evidence_request": EvidenceRequestSerializer(evidence_request).data,
            "items": EvidenceItemSerializer(evidence_request.items.all(), many=True).data,
        })


class FindingEvidenceRequestView(APIView):
    def post(self, request, finding_id):
        actor = actor_for_user(request.user)
        data = _valid(FindingEvidenceRequestSerializer, request)
        evidence_request = evidence.request_evidence_for_finding(
            actor, finding_id, data["evidence_type"], data["request_note"], data["due_date"]
        )
        return Response(EvidenceRequestSerializer(evidence_request).data, status=status.HTTP_201_CREATED)


# ==== Evidencia ====
class EvidenceRequestListView(APIView):
    def get(self, request):
        actor_for_user(request.user)
        requests = evidence.list_evidence_requests(**_filters(EvidenceRequestFilterSerializer, request))
        return Response(EvidenceRequestSerializer(requests, many=True).data)

    def post(self, request):
        actor = actor_for_user(request.user)
        data = _valid(EvidenceRequestCreateSerializer, request)
        evidence_request = evidence.request_evidence(
            actor,
            data["evidence_type"],
            data["request_note"],
            due_date=data["due_date"],
            audit_id=data["audit_id"],
            indicator_id=data["indicator_id"],
        )
        return Response(EvidenceRequestSerializer(evidence_request).data, status=status.HTTP_201_CREATED)


class EvidenceRequestDetailView(APIView):
    def get(self, request, request_id):
        actor_for_user(request.user)
        evidence_request = get_or_404(
            EvidenceRequest.objects.prefetch_related("items"), "Evidence request not found", pk=request_id
        )
        return Response(EvidenceRequestSerializer(evidence_request).data)


class EvidenceSubmitView(APIView):
    def post(self, request, request_id):
        actor = actor_for_user(request.user)
        data = _valid(EvidenceSubmitSerializer, request)
        item = evidence.submit_evidence(actor, request_id, **data)
        return Response(EvidenceItemSerializer(item).data, status=status.HTTP_201_CREATED)


class EvidenceStartReviewView(APIView):
    def post(self, request, request_id):
        evidence_request = evidence.start_review(actor_for_user(request.user), request_id)
        return Response(EvidenceRequestSerializer(evidence_request).data)


class EvidenceReviewView(APIView):
    def post(self, request, request_id):
        actor = actor_for_user(request.user)
        data = _valid(EvidenceReviewSerializer, request)
        evidence_request = evidence.review_evidence(actor, request_id, data["decision"], data["review_note"])
        return Response(EvidenceRequestSerializer(evidence_request).data)


# ==== Checklist documental ====
class DocumentChecklistView(APIView):
    def get(self, request, document_type):
        actor_for_user(request.user)
        template = reviews.get_checklist(document_type)
        return Response(DocumentChecklistTemplateSerializer(template).data)


class DocumentReviewCreateView(APIView):
    def post(self, request):
        actor = actor_for_user(request.user)
        data = _valid(DocumentReviewInputSerializer, request)
        outcome = reviews.submit_document_review(
            actor,
            data["evidence_item_id"],
            data["responses"],
            data["decision"],
            comments=data["comments"],
            audit_id=data["audit_id"],
        )
        body = DocumentReviewSerializer(outcome.review).data
        body["warnings"] = outcome.warnings
        return Response(body, status=status.HTTP_201_CREATED)


class DocumentReviewDetailView(APIView):
    def get(self, request, evidence_item_id):
        actor_for_user(request.user)
        review = reviews.get_document_review(evidence_item_id)
        return Response(DocumentReviewSerializer(review).data)
