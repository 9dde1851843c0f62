"""Credential resolution for Tripletex clients.

Tripletex authenticates with two long-lived secrets: a consumer token
(issued per application) and an employee token (issued per company user).
Accountants may additionally act on behalf of a client company, identified
by its numeric id.

Resolution order for every value (highest to lowest priority):
1. Explicitly provided value
2. Environment variable
3. .env file (python-dotenv)
4. Default value

Recognised environment variables:
    TRIPLETEX_CONSUMER_TOKEN        required
    TRIPLETEX_EMPLOYEE_TOKEN        required
    TRIPLETEX_ACCOUNTANT_CLIENT_ID  optional, integer
    TRIPLETEX_BASE_URL              optional

Example:
    ```python
    from tripletex_client.auth import CredentialResolver

    resolver = CredentialResolver()
    credentials = resolver.resolve_credentials()
    token = resolver.resolve_token_file("~/.cache/tripletex/token.json")
    ```

Security Considerations:
    - Credentials are never logged in full (masked with ***)
    - Only source information is logged (env var name, file path, etc.)
    - Thread-safe dotenv loading with lock
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock

import dotenv

from tripletex_client.auth.exceptions import CredentialError, CredentialFileError, CredentialNotFoundError
from tripletex_client.auth.token import Token

logger = logging.getLogger(__name__)

CONSUMER_TOKEN_ENV = "TRIPLETEX_CONSUMER_TOKEN"
EMPLOYEE_TOKEN_ENV = "TRIPLETEX_EMPLOYEE_TOKEN"
ACCOUNTANT_CLIENT_ID_ENV = "TRIPLETEX_ACCOUNTANT_CLIENT_ID"
BASE_URL_ENV = "TRIPLETEX_BASE_URL"


@dataclass(frozen=True)
class Credentials:
    """Immutable Tripletex credentials.

    Attributes:
        consumer_token: Application specific token.
        employee_token: Client (company user) specific token.
        accountant_client_id: Company to act on behalf of when the employee
            token belongs to an accountant. None for ordinary access.
    """

    consumer_token: str = field(repr=False)
    employee_token: str = field(repr=False)
    accountant_client_id: int | None = None


class CredentialResolver:
    """Resolve Tripletex credentials from multiple sources with priority ordering.

    Attributes:
        _dotenv_loaded: Whether .env file has been loaded.
        _dotenv_lock: Thread lock for safe dotenv loading.
    """

    def __init__(self, dotenv_path: str | None = None, load_dotenv: bool = True):
        """Initialize credential resolver.

        Args:
            dotenv_path: Path to .env file. If None, searches parent directories
                for .env file (default behavior of python-dotenv).
            load_dotenv: Whether to load .env file. Set to False to skip
                .env file loading (useful for testing).
        """
        self._dotenv_loaded = False
        self._dotenv_lock = Lock()
        self._dotenv_path = dotenv_path
        self._load_dotenv_enabled = load_dotenv

        if self._load_dotenv_enabled:
            self._ensure_dotenv_loaded()

    def _ensure_dotenv_loaded(self) -> None:
        """Load the .env file once (thread-safe)."""
        if self._dotenv_loaded:
            return

        with self._dotenv_lock:
            if self._dotenv_loaded:
                return

            try:
                dotenv.load_dotenv(dotenv_path=self._dotenv_path)
                logger.debug("Loaded .env file for credential resolution")
            except OSError as e:
                logger.warning(f"Failed to load .env file: {e}")
            # Marked as attempted either way
            self._dotenv_loaded = True

    def resolve(
        self,
        *,
        value: str | None = None,
        env_var_name: str | None = None,
        default: str | None = None,
        required: bool = False,
        mask_in_logs: bool = True,
    ) -> str | None:
        """Resolve a single value from multiple sources.

        Args:
            value: Explicitly provided value (highest priority).
            env_var_name: Environment variable name to check.
            default: Default value if not found elsewhere.
            required: If True, raises CredentialNotFoundError when the value
                cannot be resolved.
            mask_in_logs: If True (default), masks the value in log messages.

        Returns:
            Resolved value, or None if not found and not required.

        Raises:
            CredentialNotFoundError: If required=True and nothing was found.
        """
        result = None
        source = None

        if value is not None:
            result = value
            source = "explicit parameter"
        elif env_var_name and env_var_name in os.environ:
            result = os.environ[env_var_name]
            source = f"environment variable '{env_var_name}'"
        elif default is not None:
            result = default
            source = "default value"

        if result is not None:
            shown = "***" if mask_in_logs else result
            logger.debug(f"Resolved credential from {source}: {shown}")

        if required and result is None:
            error_msg = "Required credential not found"
            if env_var_name:
                error_msg += f" (checked env var: {env_var_name})"
            raise CredentialNotFoundError(error_msg, env_var_name=env_var_name)

        return result

    def resolve_credentials(
        self,
        *,
        consumer_token: str | None = None,
        employee_token: str | None = None,
        accountant_client_id: int | None = None,
    ) -> Credentials:
        """Resolve a complete `Credentials` value.

        Explicit arguments win over the environment.

        Raises:
            CredentialNotFoundError: If either token cannot be resolved.
            CredentialError: If the accountant client id is not an integer.
        """
        consumer = self.resolve(value=consumer_token, env_var_name=CONSUMER_TOKEN_ENV, required=True)
        employee = self.resolve(value=employee_token, env_var_name=EMPLOYEE_TOKEN_ENV, required=True)

        client_id = accountant_client_id
        if client_id is None:
            raw = self.resolve(env_var_name=ACCOUNTANT_CLIENT_ID_ENV, mask_in_logs=False)
            if raw is not None and raw.strip():
                try:
                    client_id = int(raw)
                except ValueError:
                    raise CredentialError(
                        f"{ACCOUNTANT_CLIENT_ID_ENV} must be an integer, got {raw!r}"
                    ) from None

        return Credentials(
            consumer_token=consumer,
            employee_token=employee,
            accountant_client_id=client_id,
        )

    def resolve_base_url(self, *, value: str | None = None, default: str | None = None) -> str | None:
        """Resolve the API base URL (not a secret, logged in clear)."""
        return self.resolve(value=value, env_var_name=BASE_URL_ENV, default=default, mask_in_logs=False)

    def resolve_token_file(self, file_path: str | Path, *, required: bool = False) -> Token | None:
        """Load a session token previously persisted with `Token.to_dict`.

        Supports ~ and $VAR expansion in the path.

        Args:
            file_path: Path to a JSON token file.
            required: If True, a missing file raises instead of returning None.

        Returns:
            The stored token, or None if the file does not exist and is not required.

        Raises:
            CredentialFileError: If the file is required but missing, unreadable,
                or does not hold a token.
        """
        path = Path(os.path.expanduser(os.path.expandvars(str(file_path))))

        try:
            content = path.read_text()
        except FileNotFoundError:
            error_msg = f"Token file not found: {path}"
            if required:
                raise CredentialFileError(error_msg) from None
            logger.debug(error_msg)
            return None
        except PermissionError:
            raise CredentialFileError(f"Permission denied reading token file: {path}") from None
        except OSError as e:
            raise CredentialFileError(f"Error reading token file {path}: {e}") from e

        try:
            token = Token.from_dict(json.loads(content))
        except (ValueError, KeyError, TypeError) as e:
            raise CredentialFileError(f"Malformed token file {path}: {e}") from e

        logger.debug(f"Resolved session token from file: {path} (***)")
        return token
