from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VERSION = "1.0.0"

DEFAULT_GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"

DEFAULT_MODELS = [
    "llama-3.3-70b-versatile",
    "llama-3.1-8b-instant",
    "llama3-70b-8192",
    "llama3-8b-8192",
    "mixtral-8x7b-32768",
]


class Settings(BaseSettings):
    env: str = "local"

    # Upstream completion endpoint
    groq_api_url: str = DEFAULT_GROQ_API_URL
    upstream_timeout_s: float = 30.0
    temperature: float = 0.7
    max_tokens: int = 4000

    # Credential sources (settings-backed; the process environment is scanned separately)
    groq_api_key: SecretStr = SecretStr("")
    groq_api_keys: SecretStr = SecretStr("")
    numbered_key_limit: int = 10
    api_key_encryption_secret: SecretStr = SecretStr("default-encryption-secret-change-this-in-production")

    # Model fallback
    groq_api_models: str = ",".join(DEFAULT_MODELS)
    fallback_enabled: bool = True
    # Accepted for compatibility; one pass over the models per call is what is enforced
    fallback_max_attempts: int = Field(default=2, ge=1)
    fallback_retry_delay_ms: int = 500

    # Chat history
    chat_history_page_size: int = Field(default=20, gt=0)

    # Logging
    log_dir: str = "logs"
    log_level: str = "INFO"

    @field_validator("upstream_timeout_s")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("upstream_timeout_s must be positive")
        return v

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError("temperature must be between 0.0 and 2.0")
        return v

    @field_validator("max_tokens")
    @classmethod
    def validate_max_tokens(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_tokens must be positive")
        return v

    @field_validator("numbered_key_limit")
    @classmethod
    def validate_numbered_key_limit(cls, v: int) -> int:
        if v < 0:
            raise ValueError("numbered_key_limit must not be negative")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("fallback_retry_delay_ms")
    @classmethod
    def validate_retry_delay(cls, v: int) -> int:
        if v < 0:
            raise ValueError("fallback_retry_delay_ms must not be negative")
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


def parse_model_list(raw: str | None) -> list[str]:
    """
    Parse a comma-separated model string into an ordered, de-duplicated list.

    Blank entries are dropped. If nothing usable remains, the built-in
    default list is returned so the dispatcher never starts empty.

    Examples:
        >>> parse_model_list("a,a,b, b ,a")
        ['a', 'b']
        >>> parse_model_list("") == DEFAULT_MODELS
        True
    """
    models: list[str] = []
    for entry in (raw or "").split(","):
        name = entry.strip()
        if name and name not in models:
            models.append(name)
    return models or list(DEFAULT_MODELS)
