"""
Failure classification tests.
"""

from legalswami.exceptions import (
    MalformedResponseError,
    UpstreamAuthError,
    UpstreamError,
    UpstreamTransportError,
)
from legalswami.routing.classifier import FailureKind, classify_error, is_model_specific_error


def test_model_specific_markers():
    assert is_model_specific_error('{"error": {"code": "model_decommissioned"}}')
    assert is_model_specific_error("The model `llama3-8b` does not exist")
    assert is_model_specific_error("Invalid Model requested")
    assert not is_model_specific_error("Rate limit reached for requests")
    assert not is_model_specific_error(None)


def test_classify_error():
    assert classify_error(UpstreamAuthError("bad key", status_code=401)) is FailureKind.unauthorized
    assert classify_error(UpstreamTransportError("timed out")) is FailureKind.transport
    assert classify_error(MalformedResponseError("no choices")) is FailureKind.malformed_response
    assert (
        classify_error(UpstreamError("API Error", status_code=400, body="model_decommissioned"))
        is FailureKind.model_unavailable
    )
    assert classify_error(UpstreamError("API Error", status_code=503, body="overloaded")) is FailureKind.upstream_error


def test_unauthorized_wins_over_body_markers():
    error = UpstreamError("API Error", status_code=401, body="model not found")
    assert classify_error(error) is FailureKind.unauthorized


def test_bare_not_found_is_not_model_specific():
    """A 404 from a wrong endpoint URL is a generic upstream failure."""
    error = UpstreamError("API Error", status_code=404, body='{"error": {"message": "Not Found"}}')
    assert not is_model_specific_error(error.body)
    assert classify_error(error) is FailureKind.upstream_error
    assert is_model_specific_error("The model `foo` was not found: model not found")
