"""
Unit Tests for Settings validation.
"""

import pytest
from pydantic import ValidationError

from faqbot.config import Settings, get_settings
from faqbot.errors import ConfigurationError, PreconditionViolation
from faqbot.models.workflow import ActionMode


def test_defaults_are_valid():
    settings = Settings()

    assert 0.0 <= settings.match_threshold <= 1.0
    assert isinstance(settings.action_mode, ActionMode)


@pytest.mark.parametrize("threshold", [-0.1, 1.01])
def test_threshold_must_be_in_unit_interval(threshold):
    with pytest.raises(ValidationError):
        Settings(match_threshold=threshold)


@pytest.mark.parametrize("mode", ["approval_required", "notify_only"])
def test_targets_required_unless_direct_answer(mode):
    with pytest.raises(ValidationError, match="notify_targets"):
        Settings(action_mode=mode, notify_targets=[])


def test_direct_answer_needs_no_targets():
    settings = Settings(action_mode="direct_answer", notify_targets=[])

    assert settings.action_mode == ActionMode.DIRECT_ANSWER


def test_unknown_action_mode_fails_at_startup():
    with pytest.raises(ValidationError):
        Settings(action_mode="auto_magic")


def test_targets_from_comma_separated_env(monkeypatch):
    monkeypatch.setenv("ACTION_MODE", "approval_required")
    monkeypatch.setenv("NOTIFY_TARGETS", "C-maint, U-lead,,C-maint")

    settings = Settings()

    assert settings.action_mode == ActionMode.APPROVAL_REQUIRED
    assert settings.notify_targets == ["C-maint", "U-lead", "C-maint"]


def test_targets_from_json_env(monkeypatch):
    monkeypatch.setenv("ACTION_MODE", "notify_only")
    monkeypatch.setenv("NOTIFY_TARGETS", '["C-maint", "U-lead"]')

    assert Settings().notify_targets == ["C-maint", "U-lead"]


def test_unknown_knowledge_base_source():
    with pytest.raises(ValidationError):
        Settings(knowledge_base_source="s3")


def test_get_settings_raises_configuration_error(monkeypatch):
    monkeypatch.setenv("MATCH_THRESHOLD", "1.5")
    get_settings.cache_clear()

    try:
        with pytest.raises(ConfigurationError) as exc_info:
            get_settings()
    finally:
        get_settings.cache_clear()

    assert isinstance(exc_info.value, PreconditionViolation)
    assert isinstance(exc_info.value.__cause__, ValidationError)
    assert "match_threshold" in str(exc_info.value)
