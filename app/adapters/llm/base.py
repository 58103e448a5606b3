from abc import ABC, abstractmethod

class LLM(ABC):
    @abstractmethod
    async def complete(self, messages: list[dict]) -> str:
        """Return the completion text for role-tagged `messages`.

        Raises ProviderError (ProviderTimeout on timeout) on any failure.
        """
        ...
