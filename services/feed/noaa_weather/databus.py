"""
Host data bus interfaces

The feed never talks to a host runtime directly. It writes deltas through
`DataBus` and reads the live tree through `SelfDataSource`. `InMemoryDataBus`
implements both for the command line runner and for tests.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Set

logger = logging.getLogger(__name__)

Delta = Dict[str, Any]


class DataBus(Protocol):
    """Write side of the host."""

    def handle_message(self, plugin_id: str, delta: Delta) -> None:
        ...

    def set_plugin_error(self, message: str) -> None:
        ...

    def set_plugin_status(self, message: str) -> None:
        ...


class SelfDataSource(Protocol):
    """Read-only snapshot of the host's live data tree."""

    def get_self_path(self, path: str) -> Any:
        """Current value at `path`, or None."""
        ...

    def get_self_children(self, prefix: str) -> Dict[str, Any]:
        """Values of the direct children of `prefix`, keyed by child name."""
        ...


def values_delta(values: Iterable[Dict[str, Any]]) -> Delta:
    """Build a value update delta from `{"path", "value"}` entries."""
    return {"updates": [{"values": list(values)}]}


def meta_delta(metas: Iterable[Dict[str, Any]]) -> Delta:
    """Build a meta update delta from `{"path", "value": {"units"}}` entries."""
    return {"updates": [{"meta": list(metas)}]}


class MetaTracker:
    """Remembers which paths already had their unit metadata published."""

    def __init__(self):
        self._sent: Set[str] = set()

    def first_time(self, key: str) -> bool:
        """True the first time `key` is seen, False afterwards."""
        if key in self._sent:
            return False
        self._sent.add(key)
        return True

    def __contains__(self, key: str) -> bool:
        return key in self._sent

    def __len__(self) -> int:
        return len(self._sent)


class InMemoryDataBus:
    """Minimal host stand-in that applies deltas to a flat live tree."""

    def __init__(self, listener: Optional[Callable[[str, Delta], None]] = None):
        """
        Args:
            listener: Optional callback invoked with every delta received
        """
        self.tree: Dict[str, Any] = {}
        self.meta: Dict[str, Dict[str, Any]] = {}
        self.messages: List[Delta] = []
        self.errors: List[str] = []
        self.status: Optional[str] = None
        self.listener = listener

    def handle_message(self, plugin_id: str, delta: Delta) -> None:
        self.messages.append(delta)
        for update in delta.get("updates", []):
            for entry in update.get("values", []):
                self.tree[entry["path"]] = entry["value"]
            for entry in update.get("meta", []):
                self.meta.setdefault(entry["path"], {}).update(entry["value"])
        if self.listener is not None:
            self.listener(plugin_id, delta)

    def set_plugin_error(self, message: str) -> None:
        logger.warning(f"Plugin error: {message}")
        self.errors.append(message)

    def set_plugin_status(self, message: str) -> None:
        self.status = message

    def set_self_path(self, path: str, value: Any) -> None:
        """Write a value directly, e.g. the vessel position."""
        self.tree[path] = value

    def get_self_path(self, path: str) -> Any:
        return self.tree.get(path)

    def get_self_children(self, prefix: str) -> Dict[str, Any]:
        start = f"{prefix}."
        children = {}
        for path, value in self.tree.items():
            if path.startswith(start):
                child = path[len(start):]
                if "." not in child:
                    children[child] = value
        return children
