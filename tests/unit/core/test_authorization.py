"""Unit tests for the staff allowlist gate."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from django.contrib.auth.models import AnonymousUser

from modules.core.authorization import AllowlistAuthorizationGate, require_privileged
from modules.core.exceptions import NotAuthorized

pytestmark = pytest.mark.unit


def _user(email, authenticated=True):
    return SimpleNamespace(email=email, is_authenticated=authenticated)


class TestAllowlistGate:
    def test_allowlisted_email_is_privileged(self):
        gate = AllowlistAuthorizationGate(["boss@donuts.test"])
        assert gate.is_privileged(_user("boss@donuts.test"))

    def test_comparison_ignores_case_and_spaces(self):
        gate = AllowlistAuthorizationGate([" Boss@Donuts.TEST "])
        assert gate.is_privileged(_user("boss@DONUTS.test"))
        assert gate.caller_email(_user(" BOSS@donuts.test")) == "boss@donuts.test"

    def test_other_email_not_privileged(self):
        gate = AllowlistAuthorizationGate(["boss@donuts.test"])
        assert not gate.is_privileged(_user("intruder@donuts.test"))

    def test_anonymous_never_privileged(self):
        gate = AllowlistAuthorizationGate(["boss@donuts.test"])
        assert gate.caller_email(AnonymousUser()) is None
        assert not gate.is_privileged(AnonymousUser())
        assert not gate.is_privileged(None)

    def test_unauthenticated_user_with_email(self):
        gate = AllowlistAuthorizationGate(["boss@donuts.test"])
        assert not gate.is_privileged(_user("boss@donuts.test", authenticated=False))

    def test_blank_email_not_privileged(self):
        gate = AllowlistAuthorizationGate(["", "boss@donuts.test"])
        assert not gate.is_privileged(_user(""))

    def test_reads_settings_when_no_allowlist_given(self, settings):
        settings.ADMIN_EMAILS = ["config@donuts.test"]
        gate = AllowlistAuthorizationGate()
        assert gate.is_privileged(_user("CONFIG@donuts.test"))
        settings.ADMIN_EMAILS = []
        assert not gate.is_privileged(_user("config@donuts.test"))


def test_require_privileged():
    require_privileged(True)
    with pytest.raises(NotAuthorized):
        require_privileged(False)
