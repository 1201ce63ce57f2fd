import logging

import pytest

from cryptofiend.credentials import (
    API_KEY_ENV,
    API_SECRET_ENV,
    CredentialStatus,
    load_credentials,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv(API_KEY_ENV, raising=False)
    monkeypatch.delenv(API_SECRET_ENV, raising=False)


def test_loads_from_environment(monkeypatch):
    monkeypatch.setenv(API_KEY_ENV, "key")
    monkeypatch.setenv(API_SECRET_ENV, "secret")

    result = load_credentials()

    assert result.status is CredentialStatus.LOADED
    assert result.is_loaded
    assert (result.api_key, result.api_secret) == ("key", "secret")
    assert result.source == "environment"


def test_missing_credentials():
    result = load_credentials()

    assert result.status is CredentialStatus.NOT_FOUND
    assert result.api_key is None and result.api_secret is None


def test_partial_credentials_are_incomplete(monkeypatch):
    monkeypatch.setenv(API_KEY_ENV, "key")

    result = load_credentials()

    assert result.status is CredentialStatus.INCOMPLETE
    assert result.api_key is None
    assert API_SECRET_ENV in result.error


def test_repr_and_logs_never_contain_secrets(monkeypatch, caplog):
    monkeypatch.setenv(API_KEY_ENV, "super-key")
    monkeypatch.setenv(API_SECRET_ENV, "super-secret")

    with caplog.at_level(logging.DEBUG):
        result = load_credentials()

    assert "super-key" not in repr(result)
    assert "super-secret" not in str(result)
    assert "super-secret" not in caplog.text
