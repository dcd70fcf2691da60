"""Option stores backing the host's option API.

A store persists one JSON-compatible value per option name. The host wraps a
store with the ``get_option``/``add_option``/``update_option`` semantics the
builder relies on.
"""

import copy
import logging
from typing import Any, Protocol

from .models import Option

logger = logging.getLogger(__name__)


class OptionStore(Protocol):
    def get(self, name: str) -> Any | None: ...

    def add(self, name: str, value: Any) -> bool: ...

    def update(self, name: str, value: Any) -> bool: ...

    def delete(self, name: str) -> bool: ...

    def all(self) -> dict[str, Any]: ...


class MemoryOptionStore:
    """Process-local store, mainly for tests and previews."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, name: str) -> Any | None:
        if name not in self._values:
            return None
        return copy.deepcopy(self._values[name])

    def add(self, name: str, value: Any) -> bool:
        if name in self._values:
            return False
        self._values[name] = copy.deepcopy(value)
        return True

    def update(self, name: str, value: Any) -> bool:
        self._values[name] = copy.deepcopy(value)
        return True

    def delete(self, name: str) -> bool:
        return self._values.pop(name, None) is not None

    def all(self) -> dict[str, Any]:
        return copy.deepcopy(self._values)


class DBOptionStore:
    """Store backed by the ``options`` table."""

    def get(self, name: str) -> Any | None:
        row = Option.get_or_none(Option.name == name)
        if row is None:
            return None
        return row.value

    def add(self, name: str, value: Any) -> bool:
        if Option.get_or_none(Option.name == name) is not None:
            return False
        Option.create(name=name, value=value)
        logger.debug(f"Option added: {name}")
        return True

    def update(self, name: str, value: Any) -> bool:
        row = Option.get_or_none(Option.name == name)
        if row is None:
            Option.create(name=name, value=value)
        else:
            row.value = value
            row.save()
        logger.debug(f"Option updated: {name}")
        return True

    def delete(self, name: str) -> bool:
        return Option.delete().where(Option.name == name).execute() > 0

    def all(self) -> dict[str, Any]:
        return {row.name: row.value for row in Option.select().order_by(Option.id)}
