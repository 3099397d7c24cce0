"""Tests for client configuration and logging setup."""

import pytest
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from sequence_client.config import ClientConfig, disable_logging, setup_logging


def test_defaults():
    config = ClientConfig()
    assert config.host == "https://e.sequence.com"
    assert config.timeout_ms is None
    assert config.flush_at == 20
    assert config.flush_interval_ms == 10000
    assert config.enable is True
    assert config.retry_count == 3


def test_host_normalization():
    assert ClientConfig(host="http://localhost:3000///").host == "http://localhost:3000"
    assert ClientConfig(host="").host == "https://e.sequence.com"
    assert ClientConfig(host=None).host == "https://e.sequence.com"


def test_flush_at_falls_back_to_default():
    """Non-positive or non-integer flush_at values use the default."""
    assert ClientConfig(flush_at=None).flush_at == 20
    assert ClientConfig(flush_at=0).flush_at == 20
    assert ClientConfig(flush_at=-5).flush_at == 20
    assert ClientConfig(flush_at="10").flush_at == 20
    assert ClientConfig(flush_at=True).flush_at == 20
    assert ClientConfig(flush_at=1).flush_at == 1


def test_interval_can_be_disabled():
    assert ClientConfig(flush_interval_ms=None).flush_interval_ms is None
    assert ClientConfig(flush_interval_ms=0).flush_interval_ms == 0

    with pytest.raises(PydanticValidationError):
        ClientConfig(flush_interval_ms=-1)


def test_retry_count_zero_disables_retries():
    config = ClientConfig(retry_count=0)
    assert config.get_sender_config()["max_retries"] == 0


def test_frozen_and_strict():
    config = ClientConfig()
    with pytest.raises(PydanticValidationError):
        config.flush_at = 5
    with pytest.raises(PydanticValidationError):
        ClientConfig(unknown=True)


def test_sender_config():
    sender_config = ClientConfig(host="http://x/", timeout_ms=0, retry_count=2).get_sender_config()
    assert sender_config["api_base_url"] == "http://x"
    assert sender_config["timeout_ms"] is None, "0 means no timeout"
    assert sender_config["max_retries"] == 2


def test_from_env(monkeypatch):
    """SEQUENCE_* variables are read, bad numbers are ignored, overrides win."""
    logger.info("Testing environment configuration...")

    monkeypatch.setenv("SEQUENCE_HOST", "http://env-host/")
    monkeypatch.setenv("SEQUENCE_FLUSH_AT", "5")
    monkeypatch.setenv("SEQUENCE_FLUSH_INTERVAL_MS", "250")
    monkeypatch.setenv("SEQUENCE_TIMEOUT_MS", "1000")
    monkeypatch.setenv("SEQUENCE_RETRY_COUNT", "many")
    monkeypatch.setenv("SEQUENCE_ENABLE", "false")

    config = ClientConfig.from_env(flush_at=7)

    assert config.host == "http://env-host"
    assert config.flush_at == 7
    assert config.flush_interval_ms == 250
    assert config.timeout_ms == 1000
    assert config.retry_count == 3, "Unparseable values keep the default"
    assert config.enable is False

    logger.info("✓ Environment configuration loaded")


def test_from_env_without_variables(monkeypatch):
    for name in ("HOST", "FLUSH_AT", "FLUSH_INTERVAL_MS", "TIMEOUT_MS", "RETRY_COUNT", "ENABLE"):
        monkeypatch.delenv(f"SEQUENCE_{name}", raising=False)

    assert ClientConfig.from_env() == ClientConfig()


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "sequence.log"

    setup_logging(level="DEBUG", log_file=log_file, console=False)
    try:
        ClientConfig(flush_at=0)
    finally:
        # Removing the sinks flushes the enqueued file writer.
        logger.remove()
        disable_logging()

    contents = log_file.read_text()
    assert "File logging enabled" in contents
    assert "Invalid flush_at: 0" in contents
