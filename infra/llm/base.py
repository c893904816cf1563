from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, Literal, Sequence

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class PromptMessage:
    role: Role
    content: str


class LLM(ABC):
    """
    Defines the contract for all completion providers.
    Both calls take the full prompt as an ordered sequence of role-tagged turns.
    """

    @abstractmethod
    async def generate(self, messages: Sequence[PromptMessage]) -> str:
        raise NotImplementedError

    @abstractmethod
    def stream(self, messages: Sequence[PromptMessage]) -> AsyncIterator[str]:
        raise NotImplementedError
