"""
Base class for Streamlit UI components.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional


class BaseComponent(ABC):
    """A renderable piece of the page bound to the application context."""

    key_prefix: str = ""

    def __init__(self, app_context):
        self.app_context = app_context
        self.config = app_context.config if app_context else None

    def widget_key(self, name: str) -> str:
        """Streamlit widget key, namespaced so two components never collide."""
        prefix = self.key_prefix or type(self).__name__
        return f"{prefix}.{name}"

    @abstractmethod
    def render(self, *args, **kwargs) -> Optional[Any]:
        """Draw the component for the current script run."""
