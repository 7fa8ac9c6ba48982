from abc import ABC, abstractmethod
from typing import Optional, Tuple

from core.intent import Command
from models.reply import Reply, TextReply


class BaseExecutor(ABC):
    """
    Base contract for all executors.
    Executors take a complete Command and return a Reply.
    No routing, no parsing, no dialogue state here.
    """

    # Entities that must be present before `execute` may run
    required_entities: Tuple[str, ...] = ()

    def usage(self, command: Command) -> Optional[Reply]:
        """A usage reply when the command can never run as given, else None."""
        return None

    def prompt_for(self, entity: str, command: Command) -> str:
        return f"Mohon lengkapi {entity} untuk perintah ini."

    def describe(self, command: Command) -> str:
        """One-line summary shown when asking the user to confirm."""
        return "Lanjutkan perintah ini?"

    @abstractmethod
    async def execute(self, command: Command) -> Reply:
        pass


def text(content: str) -> TextReply:
    return TextReply(content=content)
