"""
The variable environment shared between the host application and its scripts.
"""
from typing import Any, Dict, Iterator, Mapping, Optional, TextIO

from scriptcli.scriptcli_errors import UndefinedBindingError

STORE_VARIABLE_NAME = "store"
OUTPUT_VARIABLE_NAME = "out"
RESERVED_NAMES = frozenset({STORE_VARIABLE_NAME, OUTPUT_VARIABLE_NAME})


class Environment:
    """Named bindings visible to scripts, plus two reserved slots.

    The reserved slots live outside the user bindings:
      - `store`, a dict created once and never replaced, so scripts can keep
        state between executions,
      - `output`, the sink the running script prints into; rebound before
        every execution and published to scripts as `out`.

    Reserved slots always win when the script namespace is assembled. A host
    binding that reuses a reserved name is kept but shadowed; see
    `reserved_collisions()`.
    """

    def __init__(self, bindings: Optional[Mapping[str, Any]] = None):
        self.bindings: Dict[str, Any] = {}
        self._store: Dict[Any, Any] = {}
        self.output: Optional[TextIO] = None
        # Globals shared by every execution; functions defined by one script
        # keep resolving names here in later ones.
        self._globals: Dict[str, Any] = {}
        for name, value in (bindings or {}).items():
            self.set_variable(name, value)

    @property
    def store(self) -> Dict[Any, Any]:
        return self._store

    def set_variable(self, name: str, value: Any):
        if not isinstance(name, str):
            raise TypeError(f"Binding name must be a str, not {type(name)}")
        self.bindings[name] = value
        if name not in RESERVED_NAMES:
            self._globals[name] = value

    def get_variable(self, name: str) -> Any:
        if name == STORE_VARIABLE_NAME:
            return self._store
        if name == OUTPUT_VARIABLE_NAME and self.output is not None:
            return self.output
        try:
            return self.bindings[name]
        except KeyError:
            raise UndefinedBindingError(name) from None

    def has_variable(self, name: str) -> bool:
        if name == STORE_VARIABLE_NAME:
            return True
        if name == OUTPUT_VARIABLE_NAME and self.output is not None:
            return True
        return name in self.bindings

    def remove_variable(self, name: str):
        if name not in self.bindings:
            raise UndefinedBindingError(name)
        del self.bindings[name]
        if name not in RESERVED_NAMES:
            self._globals.pop(name, None)

    def bind_output(self, sink: TextIO):
        self.output = sink

    def variables(self) -> Dict[str, Any]:
        """A point-in-time snapshot of every name a script can see."""
        snapshot = dict(self.bindings)
        snapshot[STORE_VARIABLE_NAME] = self._store
        if self.output is not None:
            snapshot[OUTPUT_VARIABLE_NAME] = self.output
        return snapshot

    def namespace(self) -> Dict[str, Any]:
        """The persistent globals dict scripts run in, with the reserved slots refreshed."""
        ns = self._globals
        ns[STORE_VARIABLE_NAME] = self._store
        if self.output is not None:
            ns[OUTPUT_VARIABLE_NAME] = self.output
        else:
            ns.pop(OUTPUT_VARIABLE_NAME, None)
        return ns

    def update_from_namespace(self, namespace: Mapping[str, Any]):
        """Write top-level script assignments (and deletions) back into the bindings."""
        for name in list(self.bindings):
            if name in RESERVED_NAMES:
                continue
            if name not in namespace:
                del self.bindings[name]
        for name, value in namespace.items():
            if name in RESERVED_NAMES or name.startswith("__"):
                continue
            self.bindings[name] = value

    def reserved_collisions(self) -> list[str]:
        """Host binding names that are shadowed by a reserved slot."""
        return sorted(name for name in self.bindings if name in RESERVED_NAMES)

    # Mapping-style access
    def __getitem__(self, name: str) -> Any:
        return self.get_variable(name)

    def __setitem__(self, name: str, value: Any):
        self.set_variable(name, value)

    def __delitem__(self, name: str):
        self.remove_variable(name)

    def __contains__(self, name: Any) -> bool:
        return isinstance(name, str) and self.has_variable(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self.variables())

    def __len__(self) -> int:
        return len(self.variables())

    def __repr__(self) -> str:
        names = ", ".join(self.variables())
        return f"Environment({names})"
