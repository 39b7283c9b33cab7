"""Registry credential providers and auth token encoding."""

from __future__ import annotations

import base64
import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from smurf.core.errors import AuthEncodingError

DOCKER_USERNAME_ENV = "DOCKER_USERNAME"
DOCKER_PASSWORD_ENV = "DOCKER_PASSWORD"  # nosec B105


@dataclass(frozen=True)
class RegistryCredential:
    """Username/password pair held only for the duration of one push."""

    username: str
    password: str = field(repr=False)


class CredentialProvider(Protocol):
    """Interface implemented by registry credential sources."""

    def get_credential(self) -> RegistryCredential:
        """Return the credential to use for the next push."""
        ...


class EnvCredentialProvider:
    """Reads registry credentials from environment variables at call time."""

    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        username_var: str = DOCKER_USERNAME_ENV,
        password_var: str = DOCKER_PASSWORD_ENV,
    ) -> None:
        self._environ = environ
        self.username_var = username_var
        self.password_var = password_var

    def get_credential(self) -> RegistryCredential:
        """Return the current values of the configured variables (empty when unset)."""
        source = os.environ if self._environ is None else self._environ
        return RegistryCredential(
            username=source.get(self.username_var, ""),
            password=source.get(self.password_var, ""),
        )


class StaticCredentialProvider:
    """Returns a fixed credential; used by tests and scripted callers."""

    def __init__(self, username: str, password: str) -> None:
        self._credential = RegistryCredential(username=username, password=password)

    def get_credential(self) -> RegistryCredential:
        """Return the fixed credential."""
        return self._credential


def encode_registry_auth(credential: RegistryCredential) -> str:
    """Encode a credential as the URL-safe base64 JSON token sent with a push."""
    if not isinstance(credential.username, str) or not isinstance(credential.password, str):
        raise AuthEncodingError("auth encoding failed: username and password must be strings")
    try:
        payload = json.dumps(
            {"username": credential.username, "password": credential.password},
            ensure_ascii=True,
        )
    except (TypeError, ValueError) as exc:
        raise AuthEncodingError(f"auth encoding failed: {exc}") from exc
    return base64.urlsafe_b64encode(payload.encode("ascii")).decode("ascii")
