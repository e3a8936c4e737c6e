"""
Named sources of raw upstream credentials.

Each source yields zero or more raw strings. The pool concatenates every
source's output, in order, before validation and decryption.
"""

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass

import structlog

from legalswami.config import Settings

logger = structlog.get_logger()

ENV_API_KEY = "GROQ_API_KEY"
ENV_API_KEYS = "GROQ_API_KEYS"


@dataclass(frozen=True)
class CredentialSource:
    name: str
    load: Callable[[], list[str]]


@dataclass(frozen=True)
class RawCredential:
    source: str
    value: str


def split_values(raw: str | None) -> list[str]:
    """Split a comma-separated value, dropping blank entries."""
    return [value.strip() for value in (raw or "").split(",") if value.strip()]


def single_value(raw: str | None) -> list[str]:
    value = (raw or "").strip()
    return [value] if value else []


def default_sources(settings: Settings, environ: Mapping[str, str] | None = None) -> list[CredentialSource]:
    """
    Build the credential sources in merge order.

    Args:
        settings: Application settings holding the settings-backed values
        environ: Environment mapping to scan; defaults to ``os.environ``

    Returns:
        list[CredentialSource]: Settings sources first, then the environment
            variable, the comma-separated environment variable and the
            numbered variables ``GROQ_API_KEY_1`` .. ``GROQ_API_KEY_<limit>``
    """
    env = os.environ if environ is None else environ

    sources = [
        CredentialSource(
            "setting:groq_api_key",
            lambda: single_value(settings.groq_api_key.get_secret_value()),
        ),
        CredentialSource(
            "setting:groq_api_keys",
            lambda: split_values(settings.groq_api_keys.get_secret_value()),
        ),
        CredentialSource(f"env:{ENV_API_KEY}", lambda: single_value(env.get(ENV_API_KEY))),
        CredentialSource(f"env:{ENV_API_KEYS}", lambda: split_values(env.get(ENV_API_KEYS))),
    ]

    for index in range(1, settings.numbered_key_limit + 1):
        var = f"{ENV_API_KEY}_{index}"
        sources.append(CredentialSource(f"env:{var}", lambda var=var: single_value(env.get(var))))

    return sources


def gather_raw_credentials(sources: list[CredentialSource]) -> list[RawCredential]:
    """Load every source and tag each raw value with where it came from."""
    collected: list[RawCredential] = []
    for source in sources:
        values = source.load()
        if values:
            logger.info("credential_source_found", source=source.name, count=len(values))
        collected.extend(RawCredential(source=source.name, value=value) for value in values)

    logger.info("credential_sources_collected", total=len(collected))
    return collected
