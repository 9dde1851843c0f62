"""Tests for Tripletex credential resolution.

This module tests the CredentialResolver class which resolves consumer and
employee tokens, the accountant client id and persisted session tokens.
"""

import json
import logging
import os
from datetime import UTC, datetime

import pytest

from tripletex_client.auth import CredentialResolver, Credentials, Token
from tripletex_client.auth.exceptions import CredentialError, CredentialFileError, CredentialNotFoundError


class TestCredentialResolverInit:
    """Test CredentialResolver initialization."""

    def test_init_default(self):
        resolver = CredentialResolver()
        assert resolver._dotenv_loaded

    def test_init_skip_dotenv(self):
        resolver = CredentialResolver(load_dotenv=False)
        assert not resolver._dotenv_loaded

    def test_dotenv_file_is_loaded(self, tmp_path):
        dotenv_file = tmp_path / ".env"
        dotenv_file.write_text("TRIPLETEX_CONSUMER_TOKEN=from-dotenv\n")

        resolver = CredentialResolver(dotenv_path=str(dotenv_file))
        try:
            assert resolver.resolve(env_var_name="TRIPLETEX_CONSUMER_TOKEN") == "from-dotenv"
        finally:
            # python-dotenv writes straight into os.environ
            os.environ.pop("TRIPLETEX_CONSUMER_TOKEN", None)

    def test_dotenv_loaded_only_once(self, tmp_path):
        dotenv_file = tmp_path / ".env"
        dotenv_file.write_text("TEST_VAR=test_value\n")

        resolver = CredentialResolver(dotenv_path=str(dotenv_file))
        resolver._ensure_dotenv_loaded()
        resolver._ensure_dotenv_loaded()

        assert resolver._dotenv_loaded is True


class TestResolve:
    """Test single value resolution and its priority ordering."""

    def test_explicit_value_overrides_all(self, monkeypatch):
        monkeypatch.setenv("TEST_PRIORITY_KEY", "env-value")
        resolver = CredentialResolver(load_dotenv=False)

        result = resolver.resolve(value="explicit", env_var_name="TEST_PRIORITY_KEY", default="default")

        assert result == "explicit"

    def test_environment_overrides_default(self, monkeypatch):
        monkeypatch.setenv("TEST_PRIORITY_KEY", "env-value")
        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve(env_var_name="TEST_PRIORITY_KEY", default="default") == "env-value"

    def test_default_used_when_nothing_else_set(self):
        resolver = CredentialResolver(load_dotenv=False)
        assert resolver.resolve(env_var_name="TEST_MISSING", default="default") == "default"

    def test_returns_none_when_not_found(self):
        resolver = CredentialResolver(load_dotenv=False)
        assert resolver.resolve(env_var_name="TEST_MISSING") is None

    def test_raises_when_required_and_not_found(self):
        resolver = CredentialResolver(load_dotenv=False)

        with pytest.raises(CredentialNotFoundError) as exc_info:
            resolver.resolve(env_var_name="TEST_MISSING", required=True)

        assert "Required credential not found" in str(exc_info.value)
        assert exc_info.value.env_var_name == "TEST_MISSING"

    def test_value_is_masked_in_logs(self, caplog):
        caplog.set_level(logging.DEBUG)
        resolver = CredentialResolver(load_dotenv=False)

        resolver.resolve(value="super-secret-key-123")

        assert "super-secret-key-123" not in caplog.text
        assert "***" in caplog.text

    def test_masking_can_be_disabled(self, caplog):
        caplog.set_level(logging.DEBUG)
        resolver = CredentialResolver(load_dotenv=False)

        resolver.resolve(value="https://api-test.tripletex.tech/v2", mask_in_logs=False)

        assert "https://api-test.tripletex.tech/v2" in caplog.text


class TestResolveCredentials:
    """Test building a Credentials value."""

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("TRIPLETEX_CONSUMER_TOKEN", "consumer")
        monkeypatch.setenv("TRIPLETEX_EMPLOYEE_TOKEN", "employee")

        credentials = CredentialResolver(load_dotenv=False).resolve_credentials()

        assert credentials == Credentials("consumer", "employee")
        assert credentials.accountant_client_id is None

    def test_explicit_arguments_win(self, monkeypatch):
        monkeypatch.setenv("TRIPLETEX_CONSUMER_TOKEN", "env-consumer")
        monkeypatch.setenv("TRIPLETEX_EMPLOYEE_TOKEN", "env-employee")

        credentials = CredentialResolver(load_dotenv=False).resolve_credentials(
            consumer_token="explicit-consumer", accountant_client_id=7
        )

        assert credentials.consumer_token == "explicit-consumer"
        assert credentials.employee_token == "env-employee"
        assert credentials.accountant_client_id == 7

    def test_accountant_client_id_from_environment(self, monkeypatch):
        monkeypatch.setenv("TRIPLETEX_CONSUMER_TOKEN", "consumer")
        monkeypatch.setenv("TRIPLETEX_EMPLOYEE_TOKEN", "employee")
        monkeypatch.setenv("TRIPLETEX_ACCOUNTANT_CLIENT_ID", "123456")

        credentials = CredentialResolver(load_dotenv=False).resolve_credentials()

        assert credentials.accountant_client_id == 123456

    def test_non_integer_accountant_client_id(self, monkeypatch):
        monkeypatch.setenv("TRIPLETEX_CONSUMER_TOKEN", "consumer")
        monkeypatch.setenv("TRIPLETEX_EMPLOYEE_TOKEN", "employee")
        monkeypatch.setenv("TRIPLETEX_ACCOUNTANT_CLIENT_ID", "acme")

        with pytest.raises(CredentialError, match="integer"):
            CredentialResolver(load_dotenv=False).resolve_credentials()

    def test_missing_employee_token(self, monkeypatch):
        monkeypatch.setenv("TRIPLETEX_CONSUMER_TOKEN", "consumer")

        with pytest.raises(CredentialNotFoundError) as exc_info:
            CredentialResolver(load_dotenv=False).resolve_credentials()

        assert exc_info.value.env_var_name == "TRIPLETEX_EMPLOYEE_TOKEN"

    def test_repr_hides_tokens(self):
        credentials = Credentials("consumer-secret", "employee-secret", accountant_client_id=1)
        assert "secret" not in repr(credentials)


class TestResolveBaseUrl:
    """Test base URL resolution."""

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("TRIPLETEX_BASE_URL", "https://api-test.tripletex.tech/v2")
        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve_base_url(default="https://tripletex.no/v2") == "https://api-test.tripletex.tech/v2"

    def test_default(self):
        resolver = CredentialResolver(load_dotenv=False)
        assert resolver.resolve_base_url(default="https://tripletex.no/v2") == "https://tripletex.no/v2"


class TestResolveTokenFile:
    """Test loading persisted session tokens."""

    def test_loads_token(self, tmp_path):
        token = Token("persisted", datetime(2025, 2, 15, tzinfo=UTC))
        token_file = tmp_path / "token.json"
        token_file.write_text(json.dumps(token.to_dict()))

        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve_token_file(token_file) == token

    def test_env_var_expansion(self, tmp_path, monkeypatch):
        token_file = tmp_path / "token.json"
        token_file.write_text(json.dumps({"token": "t", "expiresAt": "2025-02-15T00:00:00+00:00"}))
        monkeypatch.setenv("TEST_TOKEN_DIR", str(tmp_path))

        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve_token_file("$TEST_TOKEN_DIR/token.json").token == "t"

    def test_missing_file_returns_none(self, tmp_path):
        resolver = CredentialResolver(load_dotenv=False)
        assert resolver.resolve_token_file(tmp_path / "absent.json") is None

    def test_missing_file_required(self, tmp_path):
        resolver = CredentialResolver(load_dotenv=False)

        with pytest.raises(CredentialFileError, match="not found"):
            resolver.resolve_token_file(tmp_path / "absent.json", required=True)

    @pytest.mark.parametrize("content", ["not json", "[]", '{"token": "t"}', '{"token": "t", "expiresAt": "soon"}'])
    def test_malformed_file(self, tmp_path, content):
        token_file = tmp_path / "token.json"
        token_file.write_text(content)

        with pytest.raises(CredentialFileError, match="Malformed"):
            CredentialResolver(load_dotenv=False).resolve_token_file(token_file)

    def test_directory_is_read_error(self, tmp_path):
        with pytest.raises(CredentialFileError):
            CredentialResolver(load_dotenv=False).resolve_token_file(tmp_path)

    def test_token_not_logged(self, tmp_path, caplog):
        caplog.set_level(logging.DEBUG)
        token_file = tmp_path / "token.json"
        token_file.write_text(json.dumps({"token": "file-secret-xyz", "expiresAt": "2025-02-15T00:00:00+00:00"}))

        CredentialResolver(load_dotenv=False).resolve_token_file(token_file)

        assert "file-secret-xyz" not in caplog.text
