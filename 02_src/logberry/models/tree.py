"""Value tree: the canonical representation of logged data."""

import io
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, TextIO

_KEY_SPECIALS = frozenset('"={}[]')


class ScalarKind(str, Enum):
    """Scalar variants of a value tree."""

    STRING = "string"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    BOOL = "bool"


class EventData:
    """Base of every value tree node.

    Subclasses render themselves as text (``write_to``) and as plain Python
    structures (``to_python``) for structured serialization.
    """

    def write_to(self, out: TextIO) -> None:
        """Write the text form of this node to ``out``."""
        raise NotImplementedError

    def to_python(self) -> Any:
        """Return plain dict/list/scalar data, insertion order preserved."""
        raise NotImplementedError

    def is_zero(self) -> bool:
        """Return True if this node is the zero value of its variant."""
        raise NotImplementedError

    def clone(self) -> "EventData":
        """Return a copy that shares no mutable nodes with this one."""
        return self

    def text(self) -> str:
        """Return the text form of this node."""
        buffer = io.StringIO()
        self.write_to(buffer)
        return buffer.getvalue()

    def to_json(self) -> str:
        """Serialize as JSON."""
        return json.dumps(self.to_python(), ensure_ascii=False)

    def to_bytes(self) -> bytes:
        """Serialize as UTF-8 encoded JSON."""
        return self.to_json().encode("utf-8")


@dataclass(frozen=True)
class Scalar(EventData):
    """A string, integer, float or boolean leaf."""

    value: str | int | float | bool
    kind: ScalarKind = ScalarKind.STRING

    def write_to(self, out: TextIO) -> None:
        if self.kind is ScalarKind.STRING:
            out.write(json.dumps(str(self.value), ensure_ascii=False))
        elif self.kind is ScalarKind.BOOL:
            out.write("true" if self.value else "false")
        elif self.kind is ScalarKind.FLOAT:
            out.write(repr(float(self.value)))
        else:
            out.write(str(int(self.value)))

    def to_python(self) -> Any:
        return self.value

    def is_zero(self) -> bool:
        # Booleans are always reported, False included.
        if self.kind is ScalarKind.BOOL:
            return False
        return not self.value

    def __str__(self) -> str:
        return self.text()


class Null(EventData):
    """An absent value."""

    _instance: "Null | None" = None

    def __new__(cls) -> "Null":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def write_to(self, out: TextIO) -> None:
        out.write("{ }")

    def to_python(self) -> Any:
        return None

    def is_zero(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "NULL"


NULL = Null()


class EventDataMap(dict, EventData):
    """String-keyed mapping of value tree nodes."""

    def write_to(self, out: TextIO) -> None:
        out.write("{")
        for key in sorted(self):
            out.write(" ")
            out.write(render_key(key))
            out.write("=")
            self[key].write_to(out)
        out.write(" }")

    def to_python(self) -> dict[str, Any]:
        return {key: value.to_python() for key, value in self.items()}

    def is_zero(self) -> bool:
        return len(self) == 0

    def clone(self) -> "EventDataMap":
        return EventDataMap((key, value.clone()) for key, value in self.items())

    def copy(self) -> "EventDataMap":
        return EventDataMap(self)

    def __str__(self) -> str:
        return self.text()


class EventDataSequence(list, EventData):
    """Ordered list of value tree nodes."""

    def write_to(self, out: TextIO) -> None:
        out.write("[")
        for index, item in enumerate(self):
            out.write(", " if index else " ")
            item.write_to(out)
        out.write(" ]")

    def to_python(self) -> list[Any]:
        return [item.to_python() for item in self]

    def is_zero(self) -> bool:
        return len(self) == 0

    def clone(self) -> "EventDataSequence":
        return EventDataSequence(item.clone() for item in self)

    def copy(self) -> "EventDataSequence":
        return EventDataSequence(self)

    def __str__(self) -> str:
        return self.text()


def render_key(key: str) -> str:
    """Quote ``key`` if it contains whitespace or structural characters."""
    if not key or any(ch.isspace() or ch in _KEY_SPECIALS for ch in key):
        return json.dumps(key, ensure_ascii=False)
    return key
