from abc import ABC, abstractmethod


class Page(ABC):
    """Abstract base class for dashboard pages; each render is one view lifetime."""

    @abstractmethod
    def render(self):
        pass
