"""
Least-used rotation over upstream credentials.

The pool is filled once at startup and only ever shrinks afterwards: a
credential the upstream rejects is retired for good. Usage counters decide
which credential each request gets, so load spreads evenly across keys.

Thread Safety:
    acquire() and retire() share one asyncio.Lock, so two concurrent requests
    never both pick the same least-used credential from a stale count.
"""

import asyncio
from collections.abc import Iterable

import structlog

from legalswami.credentials.crypto import mask_secret, resolve_credential
from legalswami.credentials.sources import CredentialSource, gather_raw_credentials
from legalswami.exceptions import CredentialResolutionError

logger = structlog.get_logger()


class CredentialPool:
    """
    Load-balanced set of live upstream credentials.

    Attributes:
        _usage: Requests served per credential, in insertion order
        _lock: Guards every read-modify-write of _usage
    """

    def __init__(self, credentials: Iterable[str] = ()):
        self._lock = asyncio.Lock()
        self._usage: dict[str, int] = {}
        for credential in credentials:
            self._usage.setdefault(credential, 0)

    @classmethod
    def from_sources(cls, sources: list[CredentialSource], encryption_secret: str) -> "CredentialPool":
        """
        Resolve raw values from every source into a pool.

        Values that cannot be decrypted or validated are logged and skipped.
        An empty result is not an error: the pool simply reports not ready.

        Args:
            sources: Named credential sources, in merge order
            encryption_secret: Secret for encrypted values

        Returns:
            CredentialPool: Pool holding every credential that resolved
        """
        pool = cls()

        for raw in gather_raw_credentials(sources):
            try:
                credential = resolve_credential(raw.value, encryption_secret)
            except CredentialResolutionError as e:
                logger.warning("credential_skipped", source=raw.source, reason=str(e))
                continue

            if credential in pool._usage:
                logger.info("credential_duplicate", source=raw.source, credential=mask_secret(credential))
                continue

            pool._usage[credential] = 0
            logger.info("credential_added", source=raw.source, credential=mask_secret(credential))

        if pool.is_ready:
            logger.info("credential_pool_ready", available=pool.available_count, credentials=pool.previews())
        else:
            logger.error(
                "credential_pool_empty",
                hint="Set GROQ_API_KEY, GROQ_API_KEYS or GROQ_API_KEY_1..n",
            )

        return pool

    @property
    def available_count(self) -> int:
        return len(self._usage)

    @property
    def is_ready(self) -> bool:
        return bool(self._usage)

    def previews(self) -> list[str]:
        """Masked credentials, safe for logs and status endpoints."""
        return [mask_secret(credential) for credential in self._usage]

    async def acquire(self) -> str | None:
        """
        Hand out the least-used credential and count the use.

        Ties go to the credential inserted first.

        Returns:
            str | None: The credential, or None if the pool is empty
        """
        async with self._lock:
            if not self._usage:
                logger.warning("no_credential_available")
                return None

            credential = min(self._usage, key=self._usage.__getitem__)
            self._usage[credential] += 1

        logger.debug("credential_acquired", credential=mask_secret(credential))
        return credential

    async def retire(self, credential: str) -> bool:
        """
        Remove a credential permanently. Retiring an absent credential is a no-op.

        Returns:
            bool: True if the credential was in the pool
        """
        async with self._lock:
            removed = self._usage.pop(credential, None) is not None
            remaining = len(self._usage)

        if removed:
            logger.warning("credential_retired", credential=mask_secret(credential), remaining=remaining)
        return removed

    async def usage(self) -> dict[str, int]:
        """Snapshot of usage counters keyed by credential."""
        async with self._lock:
            return dict(self._usage)
