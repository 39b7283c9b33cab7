"""Registry push exports."""

from __future__ import annotations

from smurf.registry.auth import (
    CredentialProvider,
    EnvCredentialProvider,
    RegistryCredential,
    StaticCredentialProvider,
    encode_registry_auth,
)
from smurf.registry.push import (
    ConsumerState,
    DockerPushTransport,
    PushEvent,
    PushObserver,
    PushResult,
    PushStreamConsumer,
    RegistryPushDriver,
    decode_event,
)

__all__ = [
    "ConsumerState",
    "CredentialProvider",
    "DockerPushTransport",
    "EnvCredentialProvider",
    "PushEvent",
    "PushObserver",
    "PushResult",
    "PushStreamConsumer",
    "RegistryCredential",
    "RegistryPushDriver",
    "StaticCredentialProvider",
    "decode_event",
    "encode_registry_auth",
]
