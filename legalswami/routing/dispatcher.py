"""
Model fallback dispatcher.

Sends chat completions through an ordered list of model identifiers. A
sticky cursor marks the model tried first on every call: it moves forward
(wrapping) each time a model fails and stays put when a model succeeds, so
a failing model is skipped on later calls too.

States per call:
    Idle -> Attempting(model_i) -> ... -> Succeeded | AllModelsFailed

Each attempt produces an AttemptOutcome value; only total exhaustion leaves
send_completion as an exception.
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from legalswami.config import Settings, parse_model_list
from legalswami.credentials.pool import CredentialPool
from legalswami.exceptions import AllModelsFailedError, ModelNotFoundError, UpstreamError
from legalswami.providers.base import CompletionClient
from legalswami.routing.classifier import FailureKind, classify_error

logger = structlog.get_logger()

_LOGGED_ERROR_CHARS = 100


@dataclass
class AttemptOutcome:
    """Result of sending one completion to one model."""

    model: str
    content: str | None = None
    failure: FailureKind | None = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None


class ModelDispatcher:
    """
    Sends completions with per-call model fallback and credential rotation.

    Attributes:
        client: Upstream completion client
        pool: Credential pool consulted once per attempt
        models: Immutable, de-duplicated model list
        fallback_enabled: When False, only the current model is tried
        retry_delay_s: Pause between two attempts of the same call
        max_attempts_per_model: Accepted from configuration, not enforced
    """

    def __init__(
        self,
        client: CompletionClient,
        pool: CredentialPool,
        models: Iterable[str] | None = None,
        fallback_enabled: bool = True,
        retry_delay_s: float = 0.5,
        max_attempts_per_model: int = 2,
    ):
        self.client = client
        self.pool = pool
        self.models: tuple[str, ...] = tuple(parse_model_list(",".join(models or [])))
        self.fallback_enabled = fallback_enabled
        self.retry_delay_s = retry_delay_s
        self.max_attempts_per_model = max_attempts_per_model

        self._lock = asyncio.Lock()
        self._cursor = 0
        self._success_count: dict[str, int] = {model: 0 for model in self.models}
        self._failure_count: dict[str, int] = {model: 0 for model in self.models}

        logger.info("dispatcher_initialized", models=list(self.models), fallback_enabled=fallback_enabled)

    @classmethod
    def from_settings(cls, settings: Settings, client: CompletionClient, pool: CredentialPool) -> "ModelDispatcher":
        return cls(
            client=client,
            pool=pool,
            models=parse_model_list(settings.groq_api_models),
            fallback_enabled=settings.fallback_enabled,
            retry_delay_s=settings.fallback_retry_delay_ms / 1000,
            max_attempts_per_model=settings.fallback_max_attempts,
        )

    async def send_completion(self, messages: list[dict[str, str]]) -> str:
        """
        Send a chat completion, falling back across models on failure.

        Args:
            messages: Conversation so far as {role, content} dicts, system prompt first

        Returns:
            str: Completion text from the first model that succeeds

        Raises:
            ValueError: If messages is empty
            AllModelsFailedError: If every model failed once during this call
        """
        if not messages:
            raise ValueError("messages must not be empty")

        if not self.fallback_enabled:
            return await self._send_with_single_model(messages)

        async with self._lock:
            start = self._cursor

        model_count = len(self.models)
        index = start
        model = self.models[index]
        attempts = 0
        last_error = ""

        while attempts < model_count:
            attempts += 1
            log = logger.bind(model=model, attempt=attempts, of=model_count)
            log.info("trying_model")

            outcome = await self._attempt(model, messages)

            if outcome.ok:
                await self._record_success(model)
                log.info("model_succeeded")
                return outcome.content

            last_error = outcome.error
            index = (index + 1) % model_count
            # The shared cursor only marks where the next call starts
            async with self._lock:
                self._failure_count[model] += 1
                self._cursor = index

            self._log_failure(log, outcome)

            if index == start:
                break
            model = self.models[index]

            await asyncio.sleep(self.retry_delay_s)

        logger.error("all_models_failed", models=list(self.models), attempts=attempts, last_error=last_error)
        raise AllModelsFailedError(list(self.models), last_error)

    async def _send_with_single_model(self, messages: list[dict[str, str]]) -> str:
        model = await self.get_current_model()
        outcome = await self._attempt(model, messages)

        if outcome.ok:
            await self._record_success(model)
            return outcome.content

        async with self._lock:
            self._failure_count[model] += 1
        self._log_failure(logger.bind(model=model), outcome)
        raise AllModelsFailedError([model], outcome.error)

    async def _attempt(self, model: str, messages: list[dict[str, str]]) -> AttemptOutcome:
        credential = await self.pool.acquire()
        if credential is None:
            return AttemptOutcome(model=model, failure=FailureKind.no_credential, error="No valid API key available")

        try:
            content = await self.client.complete(messages, model, credential)
        except UpstreamError as e:
            kind = classify_error(e)
            # A rejected credential is retired even though the model takes the blame for this attempt
            if kind is FailureKind.unauthorized:
                await self.pool.retire(credential)
            return AttemptOutcome(
                model=model,
                failure=kind,
                error=f"Failed to call upstream with model '{model}': {e}",
            )

        return AttemptOutcome(model=model, content=content)

    async def _record_success(self, model: str) -> None:
        async with self._lock:
            self._success_count[model] += 1
            self._failure_count[model] = 0

    @staticmethod
    def _log_failure(log, outcome: AttemptOutcome) -> None:
        log.warning("model_failed", kind=outcome.failure.value, error=outcome.error[:_LOGGED_ERROR_CHARS])
        if outcome.failure is FailureKind.model_unavailable:
            log.warning("model_unavailable", hint="Model looks decommissioned or unknown upstream")

    async def get_current_model(self) -> str:
        async with self._lock:
            return self.models[self._cursor]

    @property
    def available_models(self) -> list[str]:
        return list(self.models)

    async def get_statistics(self) -> dict[str, dict[str, int]]:
        """
        Per-model counters.

        Returns:
            dict: model -> {"success": total successes, "failures": consecutive failures}
        """
        async with self._lock:
            return {
                model: {"success": self._success_count[model], "failures": self._failure_count[model]}
                for model in self.models
            }

    async def switch_to_model(self, model_name: str) -> None:
        """
        Point the cursor at a specific model.

        Raises:
            ModelNotFoundError: If the model is not configured
        """
        if model_name not in self.models:
            raise ModelNotFoundError(model_name)

        async with self._lock:
            self._cursor = self.models.index(model_name)
        logger.info("model_switched", model=model_name)

    async def reset_failure_counts(self) -> None:
        async with self._lock:
            for model in self.models:
                self._failure_count[model] = 0
        logger.info("model_failures_reset")
