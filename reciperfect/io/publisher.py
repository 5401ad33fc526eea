"""Manifest publishing to the remote record store.

Responsibilities:
- POST one JSON manifest per processed file.
- Raise actionable publish exceptions; retries are out of scope.
"""

from __future__ import annotations

from typing import Any

import requests


class PublishError(RuntimeError):
    """Raised when the record store rejects or cannot receive a manifest."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialize publish failure metadata."""

        super().__init__(message)
        self.status_code = status_code


class ManifestPublisher:
    """Requests-based JSON publisher for per-file manifests."""

    _MAX_BODY_CHARS = 180

    def __init__(self, endpoint_url: str, timeout_seconds: float | None = None) -> None:
        """Initialize the publish endpoint and optional request timeout."""

        self.endpoint_url = endpoint_url
        self.timeout_seconds = timeout_seconds

    def publish(self, payload: dict[str, Any]) -> int:
        """POST one manifest payload and return the 2xx status code."""

        try:
            response = requests.post(
                self.endpoint_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise PublishError(f"Manifest publish transport error: {exc}") from exc

        status_code = int(response.status_code)
        if not 200 <= status_code < 300:
            body = " ".join(str(getattr(response, "text", "") or "").split())
            if len(body) > self._MAX_BODY_CHARS:
                body = f"{body[: self._MAX_BODY_CHARS - 1]}..."
            detail = f"Record store rejected manifest (HTTP {status_code})"
            raise PublishError(
                f"{detail}: {body}" if body else f"{detail}.",
                status_code=status_code,
            )
        return status_code
