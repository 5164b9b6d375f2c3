from abc import ABC, abstractmethod
from typing import Any, Dict


class Workflow(ABC):
    """Request/response step driven from a page.

    `run` is a plain call for chat-style workflows and a coroutine for those
    that fan out to the backend; the latter are driven through the AsyncRunner.
    """

    @abstractmethod
    def run(self, input: Dict[str, Any]) -> Any:
        pass
