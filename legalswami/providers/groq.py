import httpx
from openai import (
    APIConnectionError,
    APIResponseValidationError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
)

from legalswami.config import DEFAULT_GROQ_API_URL
from legalswami.exceptions import (
    MalformedResponseError,
    UpstreamAuthError,
    UpstreamError,
    UpstreamTransportError,
)
from legalswami.providers.base import CompletionClient

_COMPLETIONS_PATH = "/chat/completions"
# Placeholder only; every request carries the credential picked by the pool
_UNSET_API_KEY = "unset"


def base_url_for(api_url: str) -> str:
    """Strip the completions path so the OpenAI client can append it back."""
    url = api_url.rstrip("/")
    if url.endswith(_COMPLETIONS_PATH):
        url = url[: -len(_COMPLETIONS_PATH)]
    return url


def extract_content(response) -> str:
    """Pull ``choices[0].message.content`` out of a completion response."""
    try:
        content = response.choices[0].message.content
    except (AttributeError, IndexError, KeyError, TypeError) as e:
        raise MalformedResponseError(f"Failed to parse API response: {e!r}")

    if not isinstance(content, str):
        raise MalformedResponseError("Failed to parse API response: message content missing")
    return content


class GroqCompletionClient(CompletionClient):
    """
    Groq implementation of the CompletionClient.
    Talks to any OpenAI-compatible chat-completions endpoint.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_GROQ_API_URL,
        timeout_s: float = 30.0,
        temperature: float = 0.7,
        max_tokens: int = 4000,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__("groq")
        self.api_url = api_url
        self.temperature = temperature
        self.max_tokens = max_tokens
        # Retries are the dispatcher's job
        self.client = AsyncOpenAI(
            api_key=_UNSET_API_KEY,
            base_url=base_url_for(api_url),
            timeout=timeout_s,
            max_retries=0,
            http_client=http_client,
        )

    async def complete(self, messages: list[dict[str, str]], model: str, credential: str) -> str:
        try:
            response = await self.client.with_options(api_key=credential).chat.completions.create(
                model=model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                stream=False,
            )
        except AuthenticationError as e:
            raise UpstreamAuthError(f"API Error: {e.response.text}", status_code=401, body=e.response.text)
        except APIStatusError as e:
            raise UpstreamError(f"API Error: {e.response.text}", status_code=e.status_code, body=e.response.text)
        except APITimeoutError:
            raise UpstreamTransportError("Upstream provider timed out")
        except APIConnectionError as e:
            raise UpstreamTransportError(f"Cannot reach upstream provider: {e}")
        except (APIResponseValidationError, ValueError) as e:
            raise MalformedResponseError(f"Failed to parse API response: {e}")

        return extract_content(response)

    async def close(self) -> None:
        await self.client.close()
