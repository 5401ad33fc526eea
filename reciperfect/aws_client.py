"""AWS client utilities for extraction, translation, and speech stages.

Responsibilities:
- Create boto3 service clients bound to the configured region.
- Normalize botocore failures into provider exceptions with diagnostic metadata.
"""

from __future__ import annotations

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError, EndpointConnectionError, ReadTimeoutError


class AwsProviderError(RuntimeError):
    """Raised when an AWS provider request fails or returns malformed output."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        """Initialize provider error metadata for stage-aware diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


_MAX_PROVIDER_MESSAGE_CHARS = 180
_CREDENTIAL_CODES = frozenset(
    {
        "UnrecognizedClientException",
        "InvalidSignatureException",
        "AccessDeniedException",
        "ExpiredTokenException",
    }
)
_THROTTLING_CODES = frozenset(
    {
        "ThrottlingException",
        "TooManyRequestsException",
        "LimitExceededException",
        "ProvisionedThroughputExceededException",
        "ServiceQuotaExceededException",
    }
)
_INVALID_INPUT_CODES = frozenset(
    {
        "InvalidParameterException",
        "InvalidRequestException",
        "ValidationException",
        "UnsupportedLanguagePairException",
        "DetectedLanguageLowConfidenceException",
        "TextSizeLimitExceededException",
        "TextLengthExceededException",
        "InvalidSsmlException",
        "LanguageNotSupportedException",
        "UnsupportedDocumentException",
        "BadDocumentException",
        "DocumentTooLargeException",
    }
)


def create_aws_client(service_name: str, region_name: str) -> Any:
    """Create a boto3 client for one AWS service."""

    return boto3.client(service_name, region_name=region_name)


def _short_message(text: str) -> str:
    """Normalize and cap user-facing provider message length."""

    compact = " ".join(text.split())
    if len(compact) <= _MAX_PROVIDER_MESSAGE_CHARS:
        return compact
    return f"{compact[: _MAX_PROVIDER_MESSAGE_CHARS - 1]}..."


def _classify_client_error(provider_code: str, status_code: int | None) -> str:
    """Classify AWS service errors into deterministic diagnostic kinds."""

    if provider_code in _CREDENTIAL_CODES or status_code in {401, 403}:
        return "invalid_credentials"
    if provider_code in _THROTTLING_CODES or status_code == 429:
        return "throttled"
    if provider_code in _INVALID_INPUT_CODES or status_code == 400:
        return "invalid_input"
    if status_code is not None and status_code >= 500:
        return "service_error"
    return "http_error"


def aws_error_to_provider_error(service_name: str, exc: Exception) -> AwsProviderError:
    """Convert botocore exceptions into normalized provider exceptions with metadata."""

    if isinstance(exc, AwsProviderError):
        return exc

    if isinstance(exc, ClientError):
        error_payload = exc.response.get("Error", {}) if isinstance(exc.response, dict) else {}
        metadata = (
            exc.response.get("ResponseMetadata", {}) if isinstance(exc.response, dict) else {}
        )
        provider_code = str(error_payload.get("Code", "") or "") or None
        raw_status = metadata.get("HTTPStatusCode")
        status_code = raw_status if isinstance(raw_status, int) else None
        failure_kind = _classify_client_error(provider_code or "", status_code)
        message = _short_message(str(error_payload.get("Message", "") or ""))
        headline = f"AWS {service_name} request failed"
        if provider_code:
            headline = f"{headline} ({provider_code})"
        detail = f"{headline}: {message}" if message else f"{headline}."
        return AwsProviderError(
            detail,
            failure_kind=failure_kind,
            status_code=status_code,
            provider_code=provider_code,
        )

    if isinstance(exc, ReadTimeoutError):
        return AwsProviderError(f"AWS {service_name} request timed out.", failure_kind="timeout")
    if isinstance(exc, EndpointConnectionError):
        return AwsProviderError(
            f"AWS {service_name} endpoint is unreachable: {_short_message(str(exc))}",
            failure_kind="transport",
        )
    if isinstance(exc, BotoCoreError):
        return AwsProviderError(
            f"AWS {service_name} client error: {_short_message(str(exc))}",
            failure_kind="transport",
        )
    return AwsProviderError(
        f"AWS {service_name} request failed: {_short_message(str(exc))}",
        failure_kind="unknown",
    )
