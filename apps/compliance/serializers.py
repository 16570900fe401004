# apps/compliance/serializers.py
from rest_framework import serializers

from apps.compliance.models import (
    ComplianceAction, ComplianceResponse, ComplianceRun, ComplianceTemplateItem,
)


class RunCreateSerializer(serializers.Serializer):
    template_id = serializers.UUIDField()
    scope_entity_id = serializers.UUIDField()
    date = serializers.DateField(required=False, allow_null=True, default=None)


class RespondSerializer(serializers.Serializer):
    template_item_id = serializers.UUIDField()
    response_value = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    attachment_path = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class RunFilterSerializer(serializers.Serializer):
    template_id = serializers.UUIDField(required=False)
    scope_entity_id = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=ComplianceRun.STATUSES, required=False)


class ActionFilterSerializer(serializers.Serializer):
    run_id = serializers.UUIDField(required=False)
    scope_entity_id = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=ComplianceAction.STATUS_ORDER, required=False)
    assigned_to_id = serializers.UUIDField(required=False)


class ActionUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=(ComplianceAction.STATUS_OPEN, ComplianceAction.STATUS_IN_PROGRESS), required=False
    )
    assigned_to_id = serializers.UUIDField(required=False, allow_null=True)
    due_at = serializers.DateTimeField(required=False, allow_null=True)


class ActionCloseSerializer(serializers.Serializer):
    closure_notes = serializers.CharField()


class ComplianceTemplateItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = ComplianceTemplateItem
        fields = ("id", "title", "guidance_text", "response_type", "is_critical", "sort_order")


class ComplianceResponseSerializer(serializers.ModelSerializer):
    class Meta:
        model = ComplianceResponse
        fields = ("id", "run", "template_item", "response_value", "notes", "attachment_path",
                  "responded_by", "updated_at")


class ComplianceActionSerializer(serializers.ModelSerializer):
    class Meta:
        model = ComplianceAction
        fields = ("id", "run", "template_item", "scope_type", "scope_entity_id", "severity", "status", "title",
                  "description", "due_at", "assigned_to", "closed_at", "closure_notes", "closed_by", "created_at")


class ComplianceRunSerializer(serializers.ModelSerializer):
    class Meta:
        model = ComplianceRun
        fields = ("id", "template", "scope_type", "scope_entity_id", "frequency", "period_start", "period_end",
                  "status", "status_color", "created_by", "submitted_by", "submitted_at", "locked_at",
                  "created_at")


class ComplianceRunDetailSerializer(ComplianceRunSerializer):
    items = serializers.SerializerMethodField()
    responses = ComplianceResponseSerializer(many=True, read_only=True)
    actions = ComplianceActionSerializer(many=True, read_only=True)

    class Meta(ComplianceRunSerializer.Meta):
        fields = ComplianceRunSerializer.Meta.fields + ("items", "responses", "actions")

    def get_items(self, obj):
        return ComplianceTemplateItemSerializer(obj.template.items.all(), many=True).data
