"""Capability table and role checks."""

from types import SimpleNamespace

import pytest

from apps.core.errors import AuthorizationError
from apps.policy import engine
from apps.policy.engine import ADMIN, AUDITOR, REVIEWER, STAFF, allowed_roles, authorize


@pytest.mark.parametrize("role,operation,allowed", [
    (AUDITOR, "audit.create", True),
    (REVIEWER, "audit.create", False),
    (REVIEWER, "audit.close", True),
    (AUDITOR, "audit.close", False),
    (AUDITOR, "audit.add_response_in_review", False),
    (STAFF, "evidence.submit", True),
    (STAFF, "evidence.review", False),
    (AUDITOR, "finding.close", False),
    (REVIEWER, "finding.close", True),
    (STAFF, "compliance.run_submit", True),
    (STAFF, "compliance.action_close", True),
    (STAFF, "compliance.action_update", False),
    (REVIEWER, "compliance.run_lock", False),
    (ADMIN, "compliance.run_lock", True),
])
def test_capability_table(role, operation, allowed):
    assert (role in allowed_roles(operation)) is allowed


def test_admin_can_do_everything():
    assert all(ADMIN in allowed_roles(op) for op in engine.CAPABILITIES)


def test_unknown_operation_is_a_programming_error():
    with pytest.raises(KeyError):
        allowed_roles("audit.delete")


def test_overrides_replace_roles(settings):
    settings.ACCESS_POLICY_OVERRIDES = {"compliance.run_lock": {ADMIN, REVIEWER}}
    assert allowed_roles("compliance.run_lock") == {ADMIN, REVIEWER}


class TestAuthorize:

    def test_returns_actor(self):
        actor = SimpleNamespace(pk=1, role=AUDITOR, is_active=True)
        assert authorize(actor, "audit.create") is actor

    def test_inactive_actor_denied(self):
        actor = SimpleNamespace(pk=1, role=ADMIN, is_active=False)
        with pytest.raises(AuthorizationError):
            authorize(actor, "audit.create")

    def test_missing_actor_denied(self):
        with pytest.raises(AuthorizationError):
            authorize(None, "evidence.submit")

    def test_wrong_role_denied(self):
        actor = SimpleNamespace(pk=1, role=STAFF, is_active=True)
        with pytest.raises(AuthorizationError) as exc:
            authorize(actor, "evidence.start_review")
        assert exc.value.status_code == 403
