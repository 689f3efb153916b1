import pytest
from pydantic import ValidationError

from dcp_ripper.config import Settings, get_settings
from dcp_ripper.core.enums import Downmixer


@pytest.fixture(autouse=True)
def clean_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.LOG_LEVEL == "INFO"
    assert settings.LOG_FILE is None
    assert settings.BLOCK_SIZE == 1 << 18
    assert settings.downmixer == Downmixer.SURROUND
    assert settings.OUTPUT_CHANNELS == 6
    assert settings.OUTPUT_PATH is None
    assert settings.MULTILINGUAL is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DCP_RIPPER_LOG_LEVEL", "debug")
    monkeypatch.setenv("DCP_RIPPER_BLOCK_SIZE", "4096")
    monkeypatch.setenv("DCP_RIPPER_DOWNMIXER", "GAIN_KEEPING_51")
    monkeypatch.setenv("DCP_RIPPER_OUTPUT_CHANNELS", "8")
    monkeypatch.setenv("DCP_RIPPER_OUTPUT_PATH", "parent")
    monkeypatch.setenv("DCP_RIPPER_MULTILINGUAL", "true")

    settings = get_settings()
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.BLOCK_SIZE == 4096
    assert settings.DOWNMIXER == "gain-keeping-51"
    assert settings.downmixer == Downmixer.GAIN_KEEPING_51
    assert settings.OUTPUT_CHANNELS == 8
    assert settings.OUTPUT_PATH == "parent"
    assert settings.MULTILINGUAL is True
    assert get_settings() is settings


@pytest.mark.parametrize("name,value", [
    ("DCP_RIPPER_BLOCK_SIZE", "0"),
    ("DCP_RIPPER_DOWNMIXER", "dolby"),
    ("DCP_RIPPER_OUTPUT_CHANNELS", "4"),
])
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.parametrize("name,expected", [
    ("surround", Downmixer.SURROUND),
    ("Auro-Surround", Downmixer.AURO_SURROUND),
    ("CAVERN_AUTO", Downmixer.CAVERN_AUTO),
])
def test_downmixer_names(name, expected):
    assert Downmixer.from_name(name) == expected


def test_unknown_downmixer_name():
    with pytest.raises(ValueError, match="Unknown downmix strategy"):
        Downmixer.from_name("quadraphonic")
