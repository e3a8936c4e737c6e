from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    system = "system"
    user = "user"
    assistant = "assistant"


class ChatMessage(BaseModel):
    role: Role
    content: str

    def as_upstream(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class DocumentType(str, Enum):
    pdf = "PDF"
    doc = "DOC"
    txt = "TXT"


class ChatRequest(BaseModel):
    message: str
    generate_document: bool = False
    document_type: Optional[DocumentType] = None

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message cannot be empty")
        return v


class ChatRecord(BaseModel):
    """A stored question/answer exchange."""

    id: str
    user_id: str
    message: str
    response: Optional[str] = None
    is_document: bool = False
    document_type: Optional[DocumentType] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# Response models for API endpoints


class RootResponse(BaseModel):
    """Response model for root endpoint."""

    message: str
    version: str
    docs: dict[str, str]


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: Literal["healthy", "degraded"]
    keys_available: int
    current_model: str
    models_total: int
    version: str


class PublicStatusResponse(BaseModel):
    status: Literal["online"]
    service: str
    version: str


class ModelCounters(BaseModel):
    """Counters for one model identifier."""

    success: int
    failures: int


class ModelStatusResponse(BaseModel):
    """Response model for model routing endpoints."""

    current_model: str
    models: list[str]
    statistics: dict[str, ModelCounters]
    fallback_enabled: bool


class SwitchModelRequest(BaseModel):
    """Request model for forcing the dispatcher onto a model."""

    model: str = Field(description="Model identifier to try first on the next request")


class CredentialPoolStatus(BaseModel):
    """Response model for credential pool status."""

    ready: bool
    available: int
    previews: list[str]
