# apps/compliance/views.py
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.compliance import services
from apps.compliance.models import ComplianceRun
from apps.compliance.serializers import (
    ActionCloseSerializer, ActionFilterSerializer, ActionUpdateSerializer, ComplianceActionSerializer,
    ComplianceResponseSerializer, ComplianceRunDetailSerializer, ComplianceRunSerializer, RespondSerializer,
    RunCreateSerializer, RunFilterSerializer,
)
from apps.core.errors import StateConflict, get_or_404
from apps.core.models import CompanyUser
from apps.core.services import actor_for_user


def _filters(serializer_class, request):
    serializer = serializer_class(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class RunListView(APIView):
    def get(self, request):
        actor_for_user(request.user)
        runs = services.list_runs(**_filters(RunFilterSerializer, request))
        return Response(ComplianceRunSerializer(runs, many=True).data)

    def post(self, request):
        actor = actor_for_user(request.user)
        serializer = RunCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        run, created = services.find_or_create_run(actor, data["template_id"], data["scope_entity_id"], data["date"])
        if not created:
            # el cliente reutiliza la corrida existente del período
            raise StateConflict({
                "error": "A run already exists for this template, scope and period",
                "existing_run_id": str(run.pk),
            })
        return Response(ComplianceRunSerializer(run).data, status=status.HTTP_201_CREATED)


class RunDetailView(APIView):
    def get(self, request, run_id):
        actor_for_user(request.user)
        run = get_or_404(
            ComplianceRun.objects.select_related("template").prefetch_related("responses", "actions"),
            "Run not found",
            pk=run_id,
        )
        return Response(ComplianceRunDetailSerializer(run).data)


class RunRespondView(APIView):
    def post(self, request, run_id):
        actor = actor_for_user(request.user)
        serializer = RespondSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        response = services.respond(
            actor,
            run_id,
            data["template_item_id"],
            response_value=data["response_value"],
            notes=data["notes"],
            attachment_path=data["attachment_path"],
        )
        return Response(ComplianceResponseSerializer(response).data)


class RunSubmitView(APIView):
    def post(self, request, run_id):
        submission = services.submit_run(actor_for_user(request.user), run_id)
        return Response({
            "run": ComplianceRunSerializer(submission.run).data,
            "status_color": submission.status_color,
            "actions_created": submission.actions_created,
        })


class ActionListView(APIView):
    def get(self, request):
        actor_for_user(request.user)
        actions = services.list_actions(**_filters(ActionFilterSerializer, request))
        return Response(ComplianceActionSerializer(actions, many=True).data)


class ActionDetailView(APIView):
    def patch(self, request, action_id):
        actor = actor_for_user(request.user)
        serializer = ActionUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        changes = {}
        if "status" in data:
            changes["status"] = data["status"]
        if "assigned_to_id" in data:
            assignee_id = data["assigned_to_id"]
            changes["assigned_to"] = (
                get_or_404(CompanyUser.objects.filter(is_active=True), "Assignee not found", pk=assignee_id)
                if assignee_id else None
            )
        if "due_at" in data:
            changes["due_at"] = data["due_at"]
        action = services.update_action(actor, action_id, **changes)
        return Response(ComplianceActionSerializer(action).data)


class ActionCloseView(APIView):
    def post(self, request, action_id):
        actor = actor_for_user(request.user)
        serializer = ActionCloseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        action = services.close_action(actor, action_id, serializer.validated_data["closure_notes"])
        return Response(ComplianceActionSerializer(action).data)
