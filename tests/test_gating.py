"""
Tests for plan matching and the admin authorization policy.
"""
from unittest.mock import patch

import pytest

from app.core.gating import AuthorizationPolicy, has_active_plan, has_active_pro, normalize_plan
from app.db.models.user import User


def _user(plan="free", status="active", role="user", email="someone@example.com"):
    return User(id="u-1", email=email, subscription_plan=plan, subscription_status=status, role=role)


@pytest.mark.parametrize("plan", ["pro", "Pro", "Pro Plus", " P R O ", "pro-legacy"])
def test_active_plan_matches_substring(plan):
    assert has_active_plan(_user(plan=plan), "pro")


def test_canceled_pro_is_not_active():
    assert not has_active_pro(_user(plan="pro", status="canceled"))


@pytest.mark.parametrize("plan", ["free", "basic", "", None])
def test_non_pro_plans(plan):
    assert not has_active_pro(_user(plan=plan))


def test_basic_tier():
    assert has_active_plan(_user(plan="Basic"), "basic")
    assert not has_active_plan(_user(plan="Basic"), "pro")


def test_missing_user():
    assert not has_active_plan(None, "pro")


def test_normalize_plan():
    assert normalize_plan("  Pro\tPlus ") == "proplus"
    assert normalize_plan(None) == ""


def test_policy_unions_email_and_role():
    policy = AuthorizationPolicy(["Owner@CVForge.test", " "])

    assert policy.is_admin(_user(email="owner@cvforge.test"))
    assert policy.is_admin(_user(role="admin"))
    assert not policy.is_admin(_user())
    assert not policy.is_admin(None)


def test_policy_identity_lookup(db, make_user):
    make_user(email="staff@example.com", user_id="staff-1", role="admin")
    make_user(email="plain@example.com", user_id="plain-1")
    policy = AuthorizationPolicy(["owner@cvforge.test"])

    assert policy.is_admin_identity(db, "staff-1", "staff@example.com")
    assert policy.is_admin_identity(db, "unknown", "owner@cvforge.test")
    assert not policy.is_admin_identity(db, "plain-1", "plain@example.com")
    assert not policy.is_admin_identity(db, "ghost", "ghost@example.com")


def test_policy_denies_on_lookup_error(db):
    policy = AuthorizationPolicy([])

    with patch("app.core.gating.crud.get_user", side_effect=RuntimeError("store down")):
        assert not policy.is_admin_identity(db, "staff-1", "staff@example.com")
