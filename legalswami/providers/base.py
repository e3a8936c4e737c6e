from abc import ABC, abstractmethod


class CompletionClient(ABC):
    """
    Abstract base class for upstream chat-completion endpoints.
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def complete(self, messages: list[dict[str, str]], model: str, credential: str) -> str:
        """
        Send one chat completion with a specific model and credential.

        Returns:
            str: The completion text

        Raises:
            UpstreamError: Any failure, classified by subclass
        """
        pass

    async def close(self) -> None:
        """Cleanup resources. Override if the client holds connections."""
        pass
