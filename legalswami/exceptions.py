class LegalSwamiException(Exception):
    """Base exception for all LegalSwami errors."""

    pass


class CredentialResolutionError(LegalSwamiException):
    """Raised when a configured raw value cannot be turned into a usable credential."""

    pass


class UpstreamError(LegalSwamiException):
    """Base exception for errors returned by the upstream completion endpoint."""

    def __init__(self, message: str, status_code: int = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UpstreamAuthError(UpstreamError):
    """Raised when the upstream rejects the credential (HTTP 401)."""

    pass


class UpstreamTransportError(UpstreamError):
    """Raised on timeouts and connection failures before any response arrives."""

    pass


class MalformedResponseError(UpstreamError):
    """Raised when a successful response carries no usable completion text."""

    pass


class ServiceUnavailableError(LegalSwamiException):
    """Raised when no model is able to handle the request."""

    pass


class AllModelsFailedError(ServiceUnavailableError):
    """Raised once every configured model has failed within a single call."""

    def __init__(self, models: list[str], last_error: str):
        super().__init__(f"All models failed. Models tried: {models}\nLast error: {last_error}")
        self.models = list(models)
        self.last_error = last_error


class ModelNotFoundError(LegalSwamiException):
    """Raised when switching to a model that is not configured."""

    def __init__(self, model_name: str):
        super().__init__(f"Model not found: {model_name}")
        self.model_name = model_name


class ChatNotFoundError(LegalSwamiException):
    """Raised when a chat does not exist for the requesting user."""

    def __init__(self, chat_id: str):
        super().__init__(f"Chat not found: {chat_id}")
        self.chat_id = chat_id
