from pathlib import Path

import pydantic
import pytest

from schemaground.config import EngineSettings, load_settings


def test_defaults(monkeypatch):
    for var in ("DATA_DIR", "LOG_LEVEL", "INDENT_DOCUMENTS", "TIMESTAMP_FORMAT", "LOG_FORMAT"):
        monkeypatch.delenv(f"SCHEMAGROUND__{var}", raising=False)
    settings = EngineSettings()

    assert settings.data_dir == Path("data")
    assert settings.indent_documents == 2
    assert settings.timestamp_format == "%Y-%m-%d %H:%M:%S"
    assert settings.log_level == "INFO"
    assert settings.log_format == "console"


def test_env_vars(monkeypatch, tmp_path):
    monkeypatch.setenv("SCHEMAGROUND__DATA_DIR", str(tmp_path))
    monkeypatch.setenv("SCHEMAGROUND__LOG_LEVEL", "debug")
    monkeypatch.setenv("SCHEMAGROUND__INDENT_DOCUMENTS", "0")

    settings = load_settings()

    assert settings.data_dir == tmp_path
    assert settings.log_level == "DEBUG"
    assert settings.indent_documents is None


def test_kwargs_override_env(monkeypatch):
    monkeypatch.setenv("SCHEMAGROUND__LOG_LEVEL", "ERROR")
    assert load_settings(log_level="warning").log_level == "WARNING"


@pytest.mark.parametrize(
    "kwargs", [{"indent_documents": -1}, {"log_level": "LOUD"}, {"log_format": "xml"}]
)
def test_invalid_settings(kwargs):
    with pytest.raises(pydantic.ValidationError):
        load_settings(**kwargs)
