# tests/test_config.py
import logging

import pytest

from construction_dashboard.config import load_settings, DEFAULT_DATABASE_URL
from construction_dashboard.logging_config import configure_logging, JSONFormatter, ReadableFormatter
from construction_dashboard.services.exceptions import ConfigurationError

def test_defaults_without_environment():
    settings = load_settings({})

    assert settings.secret_key is None
    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.token_ttl_seconds == 86400
    assert settings.bcrypt_rounds == 12
    assert settings.log_format == "text"

def test_missing_secret_is_fatal():
    with pytest.raises(ConfigurationError):
        load_settings({"DASHBOARD_SECRET_KEY": ""}).require_secret_key()

def test_values_are_read_from_environment():
    settings = load_settings({
        "DASHBOARD_SECRET_KEY": "s3cret",
        "DATABASE_URL": "sqlite://",
        "BCRYPT_ROUNDS": "4",
        "LOG_LEVEL": "debug",
        "LOG_FORMAT": "JSON",
        "PORT": "9000",
    })

    assert settings.require_secret_key() == "s3cret"
    assert settings.bcrypt_rounds == 4
    assert settings.log_level == "DEBUG"
    assert settings.log_format == "json"
    assert settings.port == 9000

@pytest.mark.parametrize("environ", [{"PORT": "eighty"}, {"LOG_FORMAT": "xml"}])
def test_invalid_values_are_rejected(environ):
    with pytest.raises(ConfigurationError):
        load_settings(environ)

@pytest.mark.parametrize("fmt, formatter", [("json", JSONFormatter), ("text", ReadableFormatter)])
def test_configure_logging_installs_single_handler(fmt, formatter):
    configure_logging("WARNING", fmt)
    logger = configure_logging("DEBUG", fmt)

    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, formatter)
    assert logger.level == logging.DEBUG

def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("construction_dashboard.test", logging.INFO, __file__, 1, "created", None, None)
    record.tenant_id = 1
    record.entity_kind = "work"

    import json
    entry = json.loads(JSONFormatter().format(record))

    assert entry["message"] == "created"
    assert entry["tenant_id"] == 1
    assert entry["entity_kind"] == "work"

@pytest.mark.parametrize("raw, expected", [(None, True), ("false", False), ("0", False), ("YES", True)])
def test_seed_demo_data_flag(raw, expected):
    environ = {} if raw is None else {"SEED_DEMO_DATA": raw}
    assert load_settings(environ).seed_demo_data is expected

def test_invalid_seed_flag_is_rejected():
    with pytest.raises(ConfigurationError):
        load_settings({"SEED_DEMO_DATA": "maybe"})
