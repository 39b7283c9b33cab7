"""Registry push driver and push-event stream consumer.

The Docker Engine answers a push request with newline-delimited JSON objects
shaped ``{status?, progress?, error?}``. ``PushStreamConsumer`` turns that
sequence into observer updates and a heuristic progress counter; the driver
owns authentication, the stream lifetime and the overall deadline.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

import docker
import requests
from docker.errors import DockerException
from docker.utils import parse_repository_tag
from urllib3.exceptions import ReadTimeoutError

from smurf.core.errors import PushError
from smurf.logging_utils import get_logger
from smurf.registry.auth import CredentialProvider, encode_registry_auth

LOGGER = get_logger()

LAYER_EXISTS_MARKER = "Layer already exists"
LAYER_PUSHED_MARKER = "Pushed"
LAYER_EXISTS_INCREMENT = 10
LAYER_PUSHED_INCREMENT = 15
NOMINAL_PROGRESS_TOTAL = 100
DEFAULT_PUSH_TIMEOUT_SECONDS = 300.0
MIN_READ_TIMEOUT_SECONDS = 1.0
DEADLINE_EXCEEDED = "context deadline exceeded"


@dataclass(frozen=True)
class PushEvent:
    """One decoded object from a push stream."""

    status: str = ""
    progress: str = ""
    error: str = ""


@dataclass(frozen=True)
class PushResult:
    """Summary of a completed push."""

    image: str
    progress: int
    events_processed: int


class ConsumerState(Enum):
    """Lifecycle of a push stream consumer."""

    READING = "reading"
    ABORTED = "aborted"
    COMPLETED = "completed"


class PushObserver(Protocol):
    """Receives presentation updates while a push stream is consumed."""

    def on_status(self, status: str) -> None:
        """Handle a new status line."""
        ...

    def on_progress_text(self, text: str) -> None:
        """Handle combined status and progress text."""
        ...

    def on_advance(self, amount: int, total: int) -> None:
        """Handle a progress increment and the new running total."""
        ...


class NullPushObserver:
    """Observer that ignores all updates."""

    def on_status(self, status: str) -> None:
        del status

    def on_progress_text(self, text: str) -> None:
        del text

    def on_advance(self, amount: int, total: int) -> None:
        del amount, total


class PushStream(Protocol):
    """Iterable of raw NDJSON lines that must be closed after use."""

    def __iter__(self) -> Iterator[bytes]: ...

    def close(self) -> None: ...


class PushTransport(Protocol):
    """Opens an authenticated push request and returns its response stream."""

    def open_push(self, image: str, registry_auth: str, *, timeout_seconds: float) -> PushStream:
        """Start pushing ``image`` and return the event stream."""
        ...


def decode_event(line: bytes | str) -> PushEvent:
    """Decode one NDJSON line into a PushEvent; raises ValueError when malformed."""
    payload = json.loads(line)
    if not isinstance(payload, dict):
        raise ValueError("push event must be a JSON object.")
    error = _as_text(payload.get("error"))
    if not error:
        detail = payload.get("errorDetail")
        if isinstance(detail, dict):
            error = _as_text(detail.get("message"))
    return PushEvent(
        status=_as_text(payload.get("status")),
        progress=_as_text(payload.get("progress")),
        error=error,
    )


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class PushStreamConsumer:
    """Finite state machine over push events: READING -> ABORTED | COMPLETED."""

    def __init__(self, observer: PushObserver | None = None) -> None:
        self.observer: PushObserver = observer or NullPushObserver()
        self.state = ConsumerState.READING
        self.progress = 0
        self.events_processed = 0
        self.error: str | None = None

    def feed(self, event: PushEvent) -> ConsumerState:
        """Apply one event and return the resulting state."""
        if self.state is not ConsumerState.READING:
            raise RuntimeError(f"Cannot feed events to a consumer in state {self.state.value}.")
        if event.error:
            self.error = event.error
            self.state = ConsumerState.ABORTED
            return self.state
        if event.status:
            if LAYER_EXISTS_MARKER in event.status:
                self._advance(LAYER_EXISTS_INCREMENT)
            elif LAYER_PUSHED_MARKER in event.status:
                self._advance(LAYER_PUSHED_INCREMENT)
            self.observer.on_status(event.status)
        if event.progress:
            self.observer.on_progress_text(f"{event.status}: {event.progress}")
        self.events_processed += 1
        return self.state

    def finish(self) -> ConsumerState:
        """Mark a clean end of stream."""
        if self.state is ConsumerState.READING:
            self.state = ConsumerState.COMPLETED
        return self.state

    def _advance(self, amount: int) -> None:
        self.progress += amount
        self.observer.on_advance(amount, self.progress)


class RegistryPushDriver:
    """Authenticates, opens a push stream and consumes it under a deadline."""

    def __init__(
        self,
        transport: PushTransport,
        credentials: CredentialProvider,
        *,
        timeout_seconds: float = DEFAULT_PUSH_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be greater than zero.")
        self.transport = transport
        self.credentials = credentials
        self.timeout_seconds = timeout_seconds
        self._clock = clock

    def push(self, image: str, observer: PushObserver | None = None) -> PushResult:
        """Push ``image`` and return a PushResult, raising PushError on failure."""
        LOGGER.info("Push requested", extra={"image": image})
        deadline = self._clock() + self.timeout_seconds
        registry_auth = encode_registry_auth(self.credentials.get_credential())
        stream = self.transport.open_push(
            image,
            registry_auth,
            timeout_seconds=max(deadline - self._clock(), MIN_READ_TIMEOUT_SECONDS),
        )
        consumer = PushStreamConsumer(observer)
        try:
            try:
                for line in stream:
                    self._check_deadline(deadline)
                    if not line.strip():
                        continue
                    try:
                        event = decode_event(line)
                    except ValueError as exc:
                        LOGGER.warning(
                            "Stopped reading push stream on undecodable event",
                            extra={"image": image, "error": str(exc)},
                        )
                        break
                    if consumer.feed(event) is ConsumerState.ABORTED:
                        break
            except PushError as exc:
                # Stream failures surfacing after the deadline report the deadline.
                if str(exc) != DEADLINE_EXCEEDED and self._clock() > deadline:
                    raise PushError(DEADLINE_EXCEEDED) from exc
                raise
            if consumer.state is ConsumerState.ABORTED:
                LOGGER.warning("Push failed", extra={"image": image, "error": consumer.error})
                raise PushError(str(consumer.error))
            self._check_deadline(deadline)
            consumer.finish()
        finally:
            stream.close()
        LOGGER.info(
            "Push succeeded",
            extra={"image": image, "progress": consumer.progress},
        )
        return PushResult(
            image=image,
            progress=consumer.progress,
            events_processed=consumer.events_processed,
        )

    def _check_deadline(self, deadline: float) -> None:
        if self._clock() > deadline:
            raise PushError(DEADLINE_EXCEEDED)


class ResponsePushStream:
    """Line iterator over a streaming ``requests`` response."""

    def __init__(self, response: requests.Response) -> None:
        self._response = response

    def __iter__(self) -> Iterator[bytes]:
        try:
            yield from self._response.iter_lines()
        except requests.exceptions.Timeout as exc:
            raise PushError(DEADLINE_EXCEEDED) from exc
        except requests.exceptions.ConnectionError as exc:
            # requests wraps a read timeout on a streamed body in ConnectionError.
            if exc.args and isinstance(exc.args[0], ReadTimeoutError):
                raise PushError(DEADLINE_EXCEEDED) from exc
            raise PushError(f"push stream interrupted: {exc}") from exc
        except requests.RequestException as exc:
            raise PushError(f"push stream interrupted: {exc}") from exc

    def close(self) -> None:
        self._response.close()


class DockerPushTransport:
    """Push transport backed by the Docker Engine API via the docker SDK."""

    def __init__(self, api: docker.APIClient | None = None) -> None:
        self._api = api

    def _client(self) -> docker.APIClient:
        if self._api is None:
            try:
                self._api = docker.from_env().api
            except DockerException as exc:
                raise PushError(f"docker client init failed: {exc}") from exc
        return self._api

    def open_push(self, image: str, registry_auth: str, *, timeout_seconds: float) -> PushStream:
        """POST /images/{name}/push with the encoded auth header and stream the reply."""
        api = self._client()
        repository, tag = parse_repository_tag(image)
        # APIClient.push has no per-call timeout, so post to its URL directly.
        url = api._url("/images/{0}/push", repository)
        try:
            response = api.post(
                url,
                params={"tag": tag or "latest"},
                headers={"X-Registry-Auth": registry_auth},
                stream=True,
                timeout=timeout_seconds,
            )
        except requests.exceptions.Timeout as exc:
            raise PushError(f"push failed: {DEADLINE_EXCEEDED}") from exc
        except requests.RequestException as exc:
            raise PushError(f"push failed: {exc}") from exc
        if response.status_code >= 400:
            message = _error_message(response)
            response.close()
            raise PushError(f"push failed: {message}")
        return ResponsePushStream(response)


def _error_message(response: requests.Response) -> str:
    """Extract the daemon's error message from a failed response."""
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text.strip()}"
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return f"HTTP {response.status_code}"
