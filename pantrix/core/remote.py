"""Per-view status for remote (AI) calls — loading flag, error flag, result.

Remote calls are never cancelled, so a slow response can arrive after the
user has started another request for the same view.  Each call takes a
generation token from begin(); succeed()/fail() only apply when that token
is still the view's current one, and a late response is dropped.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pantrix.core.ai_assistant import RemoteCallError

LOGGER = logging.getLogger(__name__)

VIEW_NAMES = (
    "recipes",
    "smart_recipes",
    "smart_plate",
    "shopping_list",
    "ngos",
    "delivery_people",
    "bill_scan",
    "geocoding",
    "food_bank_data",
)


@dataclass
class RemoteView:
    name: str
    loading: bool = False
    error: Optional[str] = None
    result: Any = None
    generation: int = 0

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def begin(self) -> int:
        """Start a new request: clear the previous outcome and return its token."""
        with self._lock:
            self.generation += 1
            self.loading = True
            self.error = None
            self.result = None
            return self.generation

    def succeed(self, token: int, result: Any) -> bool:
        with self._lock:
            if token != self.generation:
                LOGGER.info("Discarding stale %s response (generation %d, current %d)", self.name, token, self.generation)
                return False
            self.result = result
            self.loading = False
            return True

    def fail(self, token: int, message: str) -> bool:
        with self._lock:
            if token != self.generation:
                LOGGER.info("Discarding stale %s error (generation %d, current %d)", self.name, token, self.generation)
                return False
            self.error = message
            self.loading = False
            return True

    def snapshot(self) -> dict:
        return {"loading": self.loading, "error": self.error, "result": self.result}


def run(view: RemoteView, func: Callable, *args, error_message: str = None, **kwargs) -> Any:
    """Call a remote function on behalf of a view.

    Returns the result, or None when the call failed (the view's error flag
    then holds a user-facing message).  Only RemoteCallError is treated as
    "no result"; anything else is a bug and propagates.
    """
    token = view.begin()
    try:
        result = func(*args, **kwargs)
    except RemoteCallError as e:
        LOGGER.warning("Remote call for %s failed: %s", view.name, e)
        view.fail(token, error_message or str(e))
        return None
    view.succeed(token, result)
    return result


class RemoteViews:
    """One RemoteView per feature view, created on first use."""

    def __init__(self) -> None:
        self._views: dict[str, RemoteView] = {}
        self._lock = threading.Lock()

    def __getitem__(self, name: str) -> RemoteView:
        if name not in VIEW_NAMES:
            raise KeyError(name)
        with self._lock:
            if name not in self._views:
                self._views[name] = RemoteView(name)
            return self._views[name]
