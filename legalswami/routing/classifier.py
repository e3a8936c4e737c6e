"""
Failure classification for upstream completion attempts.

This module maps an upstream error onto a FailureKind so the dispatcher can
log model-specific failures separately from transient ones.

Kinds:
    - unauthorized: the credential was rejected (HTTP 401)
    - model_unavailable: the error body names the model as gone or unknown
    - transport: timeout or connection failure
    - malformed_response: 2xx without usable completion text
    - upstream_error: any other non-2xx

Markers are loaded from failure_markers.yaml next to this module. Upstream
wording is not a stable contract, so classification never changes control
flow: every kind is handled as an ordinary model failure.
"""

from enum import Enum
from pathlib import Path

import yaml

from legalswami.exceptions import (
    MalformedResponseError,
    UpstreamAuthError,
    UpstreamError,
    UpstreamTransportError,
)


class FailureKind(str, Enum):
    no_credential = "no_credential"
    unauthorized = "unauthorized"
    model_unavailable = "model_unavailable"
    upstream_error = "upstream_error"
    transport = "transport"
    malformed_response = "malformed_response"


def _load_markers() -> dict[str, list[str]]:
    """
    Load failure markers from YAML configuration file.

    Returns:
        dict: Mapping of failure kind names to lowercase marker lists

    Raises:
        RuntimeError: If the markers file cannot be loaded
    """
    markers_file = Path(__file__).parent / "failure_markers.yaml"
    try:
        with open(markers_file, "r") as f:
            markers = yaml.safe_load(f)

        return {kind: [marker.lower() for marker in values] for kind, values in markers.items()}
    except FileNotFoundError:
        raise RuntimeError(f"failure_markers.yaml not found at {markers_file}")
    except Exception as e:
        raise RuntimeError(f"Failed to load failure markers: {e}")


# Load markers once at module import time
_MARKERS = _load_markers()


def is_model_specific_error(message: str | None) -> bool:
    """
    Check whether an error text says the model itself is unavailable.

    Examples:
        >>> is_model_specific_error('{"error": {"code": "model_decommissioned"}}')
        True
        >>> is_model_specific_error("rate limit reached")
        False
    """
    if not message:
        return False
    lowered = message.lower()
    return any(marker in lowered for marker in _MARKERS.get("model_unavailable", []))


def classify_error(error: UpstreamError) -> FailureKind:
    """
    Classify an upstream error raised by a CompletionClient.

    Authentication takes precedence over body markers, since a 401 must
    always retire the credential.
    """
    if isinstance(error, UpstreamAuthError) or error.status_code == 401:
        return FailureKind.unauthorized
    if isinstance(error, UpstreamTransportError):
        return FailureKind.transport
    if isinstance(error, MalformedResponseError):
        return FailureKind.malformed_response
    if is_model_specific_error(error.body or str(error)):
        return FailureKind.model_unavailable
    return FailureKind.upstream_error
