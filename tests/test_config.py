import pytest
from pydantic import ValidationError

from billsynth.core.config import GenerationConfig, Settings


@pytest.mark.parametrize("field", ["yield_every_attempts", "yield_every_failures"])
def test_yield_intervals_must_be_positive(field):
    with pytest.raises(ValidationError):
        GenerationConfig(**{field: 0})


@pytest.mark.parametrize("name", ["YIELD_EVERY_ATTEMPTS", "YIELD_EVERY_FAILURES"])
def test_yield_settings_must_be_positive(monkeypatch, name):
    monkeypatch.setenv(name, "0")
    with pytest.raises(ValidationError):
        Settings()


def test_default_ceiling_outlasts_effort_schedule():
    config = GenerationConfig()
    assert config.failure_ceiling > max(threshold for threshold, _ in config.effort_schedule)


def test_from_settings_ignores_unset_overrides():
    config = GenerationConfig.from_settings(Settings(), failure_ceiling=None, strict_halt_on_critical=True)
    assert config.failure_ceiling == 2500
    assert config.strict_halt_on_critical is True
