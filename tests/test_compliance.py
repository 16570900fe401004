"""Recurring compliance runs: periods, failure rules, submission and corrective actions."""

import uuid
from datetime import date, datetime, timedelta, timezone as dt_timezone
from types import SimpleNamespace
from unittest import mock

import pytest
from django.db import IntegrityError
from hypothesis import given, strategies as st

from apps.compliance import engine, services
from apps.compliance.models import DAILY, WEEKLY, ComplianceAction, ComplianceRun, ComplianceTemplateItem
from apps.core.errors import AuthorizationError, NotFound, StateConflict, ValidationError
from apps.core.services import history

SITE_ID = uuid.UUID("6f1c2d3e-4b5a-4c7d-8e9f-0a1b2c3d4e5f")
PARTICIPANT_ID = uuid.UUID("0d9e8f7a-6b5c-4d3e-9f1a-2b3c4d5e6f70")
SUBMITTED_AT = datetime(2024, 5, 8, 9, 30, tzinfo=dt_timezone.utc)


def item(response_type=ComplianceTemplateItem.TYPE_YES_NO_NA, critical=False, pk=None):
    return SimpleNamespace(pk=pk or uuid.uuid4(), response_type=response_type, is_critical=critical)


def answer(value=None, attachment_path=None):
    return SimpleNamespace(response_value=value, attachment_path=attachment_path)


class TestPeriods:

    def test_daily_is_the_day(self):
        assert engine.compute_period(DAILY, date(2024, 5, 8)) == (date(2024, 5, 8), date(2024, 5, 8))

    def test_weekly_is_monday_to_sunday(self):
        # miércoles
        assert engine.compute_period(WEEKLY, date(2024, 5, 8)) == (date(2024, 5, 6), date(2024, 5, 12))
        assert engine.compute_period(WEEKLY, date(2024, 5, 12)) == (date(2024, 5, 6), date(2024, 5, 12))

    def test_unknown_frequency(self):
        with pytest.raises(ValueError):
            engine.compute_period("MONTHLY", date(2024, 5, 8))

    @given(st.dates(min_value=date(2000, 1, 1), max_value=date(2100, 12, 31)))
    def test_weekly_contains_date(self, on_date):
        start, end = engine.compute_period(WEEKLY, on_date)
        assert start.weekday() == 0
        assert end - start == timedelta(days=6)
        assert start <= on_date <= end


class TestRules:

    def test_yes_no_na(self):
        check = item()
        assert engine.is_failure(check, answer("NO"))
        assert not engine.is_failure(check, answer("YES"))
        assert not engine.is_failure(check, answer("NA"))

    def test_unanswered_is_not_a_failure(self):
        assert not engine.is_failure(item(critical=True), None)

    def test_number_never_fails_without_threshold(self):
        assert not engine.is_failure(item(ComplianceTemplateItem.TYPE_NUMBER), answer("12"))

    def test_number_threshold(self, settings):
        settings.COMPLIANCE_NUMBER_FAIL_THRESHOLD = 0
        check = item(ComplianceTemplateItem.TYPE_NUMBER)
        assert engine.is_failure(check, answer("2"))
        assert not engine.is_failure(check, answer("0"))

    def test_text_fail_values_configurable(self, settings):
        check = item(ComplianceTemplateItem.TYPE_TEXT)
        assert not engine.is_failure(check, answer("Broken step at entrance"))
        settings.COMPLIANCE_FAIL_VALUES = {"YES_NO_NA": ["NO"], "TEXT": ["FAIL"]}
        assert engine.is_failure(check, answer("FAIL"))

    def test_photo_required(self):
        check = item(ComplianceTemplateItem.TYPE_PHOTO_REQUIRED)
        assert engine.is_failure(check, answer())
        assert not engine.is_failure(check, answer(attachment_path="photos/exit.jpg"))
        assert not engine.is_answered(check, answer("YES"))


class TestEvaluateRun:

    def test_worst_status_wins(self):
        critical, minor = item(critical=True), item()
        green = engine.evaluate_run([critical, minor], {critical.pk: answer("YES"), minor.pk: answer("YES")})
        amber = engine.evaluate_run([critical, minor], {critical.pk: answer("YES"), minor.pk: answer("NO")})
        red = engine.evaluate_run([critical, minor], {critical.pk: answer("NO"), minor.pk: answer("NO")})

        assert green.status_color == ComplianceRun.GREEN
        assert amber.status_color == ComplianceRun.AMBER
        assert amber.minor_failures == (minor,)
        assert red.status_color == ComplianceRun.RED
        assert red.critical_failures == (critical,)

    def test_empty_run_is_green(self):
        assert engine.evaluate_run([], {}).status_color == ComplianceRun.GREEN


@pytest.mark.django_db
class TestFindOrCreateRun:

    def test_creates_once_per_period(self, staff, site_daily):
        run, created = services.find_or_create_run(staff, site_daily.pk, SITE_ID, on_date=date(2024, 5, 8))
        again, created_again = services.find_or_create_run(staff, site_daily.pk, str(SITE_ID), on_date=date(2024, 5, 8))
        assert created is True
        assert created_again is False
        assert again.pk == run.pk
        assert ComplianceRun.objects.count() == 1

    def test_weekly_run_covers_the_week(self, staff, participant_weekly):
        run, _ = services.find_or_create_run(staff, participant_weekly.pk, PARTICIPANT_ID, on_date=date(2024, 5, 8))
        same, created = services.find_or_create_run(
            staff, participant_weekly.pk, PARTICIPANT_ID, on_date=date(2024, 5, 11)
        )
        assert (run.period_start, run.period_end) == (date(2024, 5, 6), date(2024, 5, 12))
        assert same.pk == run.pk
        assert created is False

    def test_other_entity_gets_own_run(self, staff, site_daily):
        first, _ = services.find_or_create_run(staff, site_daily.pk, SITE_ID, on_date=date(2024, 5, 8))
        other, created = services.find_or_create_run(staff, site_daily.pk, uuid.uuid4(), on_date=date(2024, 5, 8))
        assert created is True
        assert other.pk != first.pk

    def test_entity_id_required(self, staff, site_daily):
        with pytest.raises(ValidationError):
            services.find_or_create_run(staff, site_daily.pk, None)
        with pytest.raises(ValidationError):
            services.find_or_create_run(staff, site_daily.pk, "site-7")

    def test_inactive_template(self, staff, site_daily):
        site_daily.is_active = False
        site_daily.save()
        with pytest.raises(NotFound):
            services.find_or_create_run(staff, site_daily.pk, SITE_ID)

    def test_concurrent_insert_returns_existing_run(self, staff, site_daily):
        run, _ = services.find_or_create_run(staff, site_daily.pk, SITE_ID, on_date=date(2024, 5, 8))
        # el otro pedido ganó el INSERT; get_or_create choca con la restricción única
        with mock.patch.object(ComplianceRun.objects, "get_or_create", side_effect=IntegrityError):
            same, created = services.find_or_create_run(staff, site_daily.pk, SITE_ID, on_date=date(2024, 5, 8))
        assert created is False
        assert same.pk == run.pk
        assert [e.action for e in history(run)] == ["COMPLIANCE_RUN_CREATED"]


@pytest.mark.django_db
class TestSubmission:

    @pytest.fixture
    def run(self, staff, site_daily):
        return services.find_or_create_run(staff, site_daily.pk, SITE_ID, on_date=date(2024, 5, 8))[0]

    @pytest.fixture
    def site_items(self, site_daily):
        return list(site_daily.items.all())

    def answer_all(self, actor, run, items, overrides=None):
        overrides = overrides or {}
        for check in items:
            if check.response_type == ComplianceTemplateItem.TYPE_TEXT:
                value = "No new hazards"
            else:
                value = "YES"
            value, notes = overrides.get(check.title, (value, None))
            services.respond(actor, run.pk, check.pk, value, notes=notes)

    def test_respond_validates_value(self, staff, run, site_items):
        with pytest.raises(ValidationError):
            services.respond(staff, run.pk, site_items[0].pk, "MAYBE")

    def test_respond_upserts(self, staff, run, site_items):
        services.respond(staff, run.pk, site_items[0].pk, "NO")
        response = services.respond(staff, run.pk, site_items[0].pk, "YES")
        assert run.responses.count() == 1
        assert response.response_value == "YES"

    def test_respond_rejects_foreign_item(self, staff, run, participant_weekly):
        foreign = participant_weekly.items.first()
        with pytest.raises(ValidationError):
            services.respond(staff, run.pk, foreign.pk, "YES")

    def test_number_response_must_parse(self, staff, participant_weekly):
        run, _ = services.find_or_create_run(staff, participant_weekly.pk, PARTICIPANT_ID, on_date=date(2024, 5, 8))
        incidents = participant_weekly.items.get(response_type=ComplianceTemplateItem.TYPE_NUMBER)
        with pytest.raises(ValidationError):
            services.respond(staff, run.pk, incidents.pk, "three")
        assert services.respond(staff, run.pk, incidents.pk, 3).response_value == "3"

    def test_notes_only_save(self, staff, run, site_items):
        response = services.respond(staff, run.pk, site_items[0].pk, notes="Checking after lunch")
        assert response.response_value is None
        assert response.notes == "Checking after lunch"

    def test_notes_only_save_keeps_answer(self, staff, run, site_items):
        services.respond(staff, run.pk, site_items[0].pk, "NO")
        response = services.respond(staff, run.pk, site_items[0].pk, notes="Bins overflowing")
        response.refresh_from_db()
        assert response.response_value == "NO"
        assert response.notes == "Bins overflowing"

    def test_notes_only_save_on_number_item(self, staff, participant_weekly):
        run, _ = services.find_or_create_run(staff, participant_weekly.pk, PARTICIPANT_ID, on_date=date(2024, 5, 8))
        incidents = participant_weekly.items.get(response_type=ComplianceTemplateItem.TYPE_NUMBER)
        response = services.respond(staff, run.pk, incidents.pk, "", notes="Waiting on the incident register")
        assert response.response_value is None
        assert not engine.is_answered(incidents, response)

    def test_green_run(self, staff, run, site_items):
        self.answer_all(staff, run, site_items)
        result = services.submit_run(staff, run.pk, now=SUBMITTED_AT)
        assert result.status_color == ComplianceRun.GREEN
        assert result.actions_created == 0
        assert result.run.status == ComplianceRun.STATUS_SUBMITTED
        assert result.run.submitted_by == staff

    def test_critical_failure_creates_action(self, staff, run, site_items):
        self.answer_all(staff, run, site_items, {"House neat and tidy": ("NO", "Rubbish left in the kitchen")})
        result = services.submit_run(staff, run.pk, now=SUBMITTED_AT)

        assert result.status_color == ComplianceRun.RED
        assert result.actions_created == 1
        action = ComplianceAction.objects.get()
        assert action.severity == ComplianceAction.SEVERITY_HIGH
        assert action.status == ComplianceAction.STATUS_OPEN
        assert action.title == "Non-compliance: House neat and tidy"
        assert action.description == "Rubbish left in the kitchen"
        assert action.due_at == SUBMITTED_AT + timedelta(hours=48)
        assert action.scope_entity_id == SITE_ID

    def test_sla_from_settings(self, settings, staff, run, site_items):
        settings.COMPLIANCE_ACTION_SLA_HOURS = 24
        self.answer_all(staff, run, site_items, {"Exits and pathways clear": ("NO", None)})
        services.submit_run(staff, run.pk, now=SUBMITTED_AT)
        assert ComplianceAction.objects.get().due_at == SUBMITTED_AT + timedelta(hours=24)

    def test_minor_failure_is_amber_without_actions(self, staff, participant_weekly):
        run, _ = services.find_or_create_run(staff, participant_weekly.pk, PARTICIPANT_ID, on_date=date(2024, 5, 8))
        for check in participant_weekly.items.all():
            if check.response_type == ComplianceTemplateItem.TYPE_NUMBER:
                value = "0"
            else:
                value = "YES" if check.is_critical else "NO"
            services.respond(staff, run.pk, check.pk, value)

        result = services.submit_run(staff, run.pk, now=SUBMITTED_AT)
        assert result.status_color == ComplianceRun.AMBER
        assert result.actions_created == 0

    def test_unanswered_critical_blocks_submit(self, staff, run, site_items):
        services.respond(staff, run.pk, site_items[0].pk, "YES")
        with pytest.raises(ValidationError) as exc:
            services.submit_run(staff, run.pk)
        assert "Trip hazards checked and cleared" in exc.value.detail["items"]
        run.refresh_from_db()
        assert run.status == ComplianceRun.STATUS_OPEN

    def test_submit_twice_conflicts(self, staff, run, site_items):
        self.answer_all(staff, run, site_items)
        services.submit_run(staff, run.pk)
        with pytest.raises(StateConflict):
            services.submit_run(staff, run.pk)

    def test_respond_after_submit_conflicts(self, staff, run, site_items):
        self.answer_all(staff, run, site_items)
        services.submit_run(staff, run.pk)
        with pytest.raises(StateConflict):
            services.respond(staff, run.pk, site_items[0].pk, "NO")

    def test_lock_is_admin_only(self, admin, staff, run, site_items):
        self.answer_all(staff, run, site_items)
        services.submit_run(staff, run.pk)
        with pytest.raises(AuthorizationError):
            services.lock_run(staff, run.pk)
        locked = services.lock_run(admin, run.pk)
        assert locked.status == ComplianceRun.STATUS_LOCKED
        assert locked.locked_at is not None

    def test_lock_requires_submission(self, admin, run):
        with pytest.raises(StateConflict):
            services.lock_run(admin, run.pk)

    def test_history(self, admin, staff, run, site_items):
        self.answer_all(staff, run, site_items)
        services.submit_run(staff, run.pk)
        services.lock_run(admin, run.pk)
        assert [e.action for e in history(run)] == [
            "COMPLIANCE_RUN_CREATED", "COMPLIANCE_RUN_SUBMITTED", "COMPLIANCE_RUN_LOCKED",
        ]


@pytest.mark.django_db
class TestActions:

    @pytest.fixture
    def action(self, staff, site_daily):
        run, _ = services.find_or_create_run(staff, site_daily.pk, SITE_ID, on_date=date(2024, 5, 8))
        for check in site_daily.items.all():
            value = "NO" if check.title == "Exits and pathways clear" else "YES"
            services.respond(staff, run.pk, check.pk, value)
        return services.submit_run(staff, run.pk, now=SUBMITTED_AT).actions[0]

    def test_assign_and_progress(self, auditor, reviewer, action):
        updated = services.update_action(
            auditor, action.pk, status=ComplianceAction.STATUS_IN_PROGRESS, assigned_to=reviewer
        )
        assert updated.status == ComplianceAction.STATUS_IN_PROGRESS
        assert updated.assigned_to == reviewer

    def test_staff_cannot_update(self, staff, action):
        with pytest.raises(AuthorizationError):
            services.update_action(staff, action.pk, status=ComplianceAction.STATUS_IN_PROGRESS)

    def test_close_through_update_refused(self, auditor, action):
        with pytest.raises(ValidationError):
            services.update_action(auditor, action.pk, status=ComplianceAction.STATUS_CLOSED)

    def test_no_regression(self, auditor, action):
        services.update_action(auditor, action.pk, status=ComplianceAction.STATUS_IN_PROGRESS)
        with pytest.raises(StateConflict):
            services.update_action(auditor, action.pk, status=ComplianceAction.STATUS_OPEN)

    def test_close_requires_notes(self, staff, action):
        with pytest.raises(ValidationError):
            services.close_action(staff, action.pk, "  ")

    def test_close(self, staff, action):
        closed = services.close_action(staff, action.pk, "Boxes moved out of the hallway")
        assert closed.status == ComplianceAction.STATUS_CLOSED
        assert closed.closed_by == staff
        assert closed.closure_notes == "Boxes moved out of the hallway"

    def test_closed_action_is_final(self, auditor, staff, action):
        services.close_action(staff, action.pk, "Boxes moved out of the hallway")
        with pytest.raises(StateConflict):
            services.close_action(staff, action.pk, "Again")
        with pytest.raises(StateConflict):
            services.update_action(auditor, action.pk, due_at=SUBMITTED_AT)
