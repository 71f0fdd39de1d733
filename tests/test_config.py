"""Tests for configuration validation and logging helpers."""

import pytest

from reachmap.config import Config
from reachmap.errors import InvalidInputError
from reachmap.logging_utils import LOG_TAG_WARNING, log_warning


def test_defaults_validate():
    Config.validate()
    assert "Rounding Mode" in Config.display()


@pytest.mark.parametrize(
    "attribute, value",
    [
        ("ROUNDING_MODE", "nearest"),
        ("GRIDLESS_RESOLUTION", 2.0),
        ("GRIDLESS_RESOLUTION", 80.0),
        ("ITERATION_CEILING", 0),
        ("UNSAFE_TOLERANCE", -1.0),
        ("WALL_BUCKET_SIZE", 0.0),
    ],
)
def test_out_of_range_values_are_rejected(monkeypatch, attribute, value):
    monkeypatch.setattr(Config, attribute, value)

    with pytest.raises(InvalidInputError):
        Config.validate()


def test_warnings_are_tagged(monkeypatch, capsys):
    monkeypatch.setenv("REACHMAP_NO_COLOR", "1")

    log_warning("partial overlay")

    assert capsys.readouterr().out.strip() == f"{LOG_TAG_WARNING} partial overlay"
