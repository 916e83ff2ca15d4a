"""Aggregation of arbitrary values into value trees.

Rules, applied after unwrapping ``DBuilder`` objects and weak references:

    None, NULL             Nothing is merged; as a nested value, ``NULL``.
    tree map / mapping     Each entry is merged, keys made strings with str().
    other tree node        Merged as a bare value.
    record                 Each public field is copied as a key/value pair,
                           honouring the quiet, hidden and always tags.
    sequence / set         Copied element by element into a sequence.
    str, int, float, bool  Wrapped as scalars.
    exception              Its str() description when it has no fields.
    anything else          Its str() description.

Bare values merged directly into a map accumulate under the ``value`` key.
Aggregation never raises; unprintable values degrade to a placeholder.
"""

import dataclasses
import weakref
from collections.abc import Mapping, Sequence, Set
from types import BuiltinFunctionType, FunctionType, MethodType, ModuleType
from typing import Any, Iterator, Protocol, runtime_checkable

from pydantic import BaseModel

from ..models.tree import (
    NULL,
    EventData,
    EventDataMap,
    EventDataSequence,
    Scalar,
    ScalarKind,
)

TAG_KEY = "logberry"
CLASS_TAGS_ATTR = "__logberry_tags__"

VALUE_KEY = "value"
ERROR_KEY = "Error"
HIDDEN_MARKER = "<!hidden!>"
CYCLE_MARKER = "<!cycle!>"

QUIET = "quiet"
HIDDEN = "hidden"
ALWAYS = "always"

_MAX_UNWRAP = 16
_NOT_RECORDS = (type, ModuleType, FunctionType, BuiltinFunctionType, MethodType)


@runtime_checkable
class DBuilder(Protocol):
    """Object that supplies its own loggable data."""

    def logberry_data(self) -> Any:
        """Return the value to log in place of this object."""
        ...


def field_tags(*tags: str, **kwargs: Any) -> Any:
    """Declare a dataclass field carrying logberry tags.

    Example:
        password: str = field_tags(HIDDEN, default="")
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[TAG_KEY] = ",".join(tags)
    return dataclasses.field(metadata=metadata, **kwargs)


def parse_tags(raw: Any) -> frozenset[str]:
    """Split a tag declaration such as ``"hidden,always"`` into a set."""
    if not raw:
        return frozenset()
    if isinstance(raw, str):
        parts = raw.replace(",", " ").split()
    else:
        parts = [str(part) for part in raw]
    return frozenset(part.strip().lower() for part in parts if part.strip())


def describe(value: Any) -> str:
    """Return a best-effort text form of ``value``."""
    try:
        return str(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


def _builder(value: Any) -> Any:
    try:
        if not isinstance(value, DBuilder):
            return None
        method = value.logberry_data
    except Exception:
        return None
    return method if callable(method) else None


def _unwrap(value: Any) -> Any:
    for _ in range(_MAX_UNWRAP):
        if isinstance(value, weakref.ref):
            value = value()
        elif not isinstance(value, type) and _builder(value) is not None:
            try:
                built = _builder(value)()
            except Exception as exc:
                return f"<logberry_data failed: {describe(exc)}>"
            if built is value:
                return value
            value = built
        else:
            return value
    return value


def _class_tags(value: Any) -> Mapping[str, Any]:
    tags = getattr(type(value), CLASS_TAGS_ATTR, None)
    return tags if isinstance(tags, Mapping) else {}


def _public_vars(value: Any) -> dict[str, Any]:
    try:
        attrs = vars(value)
    except TypeError:
        return {}
    return {name: attr for name, attr in attrs.items() if not name.startswith("_")}


def _is_namedtuple(value: Any) -> bool:
    return isinstance(value, tuple) and hasattr(type(value), "_fields")


def is_record(value: Any) -> bool:
    """Return True if ``value`` is aggregated field by field."""
    if isinstance(value, _NOT_RECORDS) or isinstance(value, EventData):
        return False
    if dataclasses.is_dataclass(value) or isinstance(value, BaseModel):
        return True
    if _is_namedtuple(value) or isinstance(value, BaseException):
        return True
    return bool(_public_vars(value))


def _record_fields(value: Any) -> Iterator[tuple[str, Any, frozenset[str]]]:
    """Yield (name, value, tags) for each public field in declaration order."""
    class_tags = _class_tags(value)

    if dataclasses.is_dataclass(value):
        for field in dataclasses.fields(value):
            if field.name.startswith("_"):
                continue
            raw = field.metadata.get(TAG_KEY) or class_tags.get(field.name)
            yield field.name, getattr(value, field.name, None), parse_tags(raw)
        return

    if isinstance(value, BaseModel):
        for name, info in type(value).model_fields.items():
            if name.startswith("_"):
                continue
            extra = info.json_schema_extra
            raw = extra.get(TAG_KEY) if isinstance(extra, dict) else None
            yield name, getattr(value, name, None), parse_tags(raw or class_tags.get(name))
        return

    if _is_namedtuple(value):
        for name, item in zip(type(value)._fields, value):
            yield name, item, parse_tags(class_tags.get(name))
        return

    for name, item in _public_vars(value).items():
        yield name, item, parse_tags(class_tags.get(name))


class _Aggregator:
    """Single aggregation pass; tracks containers on the current path."""

    def __init__(self):
        self._active: set[int] = set()

    def merge(self, dest: EventDataMap, value: Any) -> EventDataMap:
        """Merge ``value`` into ``dest`` in place."""
        value = _unwrap(value)
        if value is None or value is NULL:
            return dest

        if isinstance(value, EventData):
            if isinstance(value, EventDataMap):
                self._guarded(value, self._merge_mapping, dest)
            else:
                _accumulate(dest, value.clone())
        elif isinstance(value, Mapping):
            self._guarded(value, self._merge_mapping, dest)
        elif isinstance(value, BaseException) or is_record(value):
            self._guarded(value, self._merge_record, dest)
        else:
            new, _ = self.copy(value)
            _accumulate(dest, new)

        return dest

    def copy(self, value: Any) -> tuple[EventData, bool]:
        """Return ``(tree, zero)`` for ``value``."""
        value = _unwrap(value)

        if value is None:
            return NULL, True

        if isinstance(value, EventData):
            return value.clone(), value.is_zero()

        if isinstance(value, bool):
            return Scalar(value, ScalarKind.BOOL), False

        if isinstance(value, int):
            return Scalar(int(value), ScalarKind.INT), value == 0

        if isinstance(value, float):
            return Scalar(float(value), ScalarKind.FLOAT), value == 0.0

        if isinstance(value, str):
            return Scalar(str(value), ScalarKind.STRING), value == ""

        if isinstance(value, (bytes, bytearray, memoryview)):
            text = bytes(value).decode("utf-8", errors="backslashreplace")
            return Scalar(text), text == ""

        if isinstance(value, Mapping):
            tree = self._guarded(value, self._merge_mapping, EventDataMap())
            return tree, tree.is_zero()

        if isinstance(value, BaseException) and not _has_fields(value):
            text = describe(value)
            return Scalar(text), text == ""

        if is_record(value):
            tree = self._guarded(value, self._merge_record, EventDataMap())
            return tree, tree.is_zero()

        if isinstance(value, (Sequence, Set)):
            tree = self._guarded(value, self._copy_sequence, EventDataSequence())
            return tree, tree.is_zero()

        text = describe(value)
        return Scalar(text), text == ""

    def _guarded(self, value: Any, build, into: EventData) -> EventData:
        marker = id(value)
        if marker in self._active:
            return Scalar(CYCLE_MARKER)
        self._active.add(marker)
        try:
            return build(value, into)
        finally:
            self._active.discard(marker)

    def _merge_mapping(self, value: Mapping, dest: EventDataMap) -> EventDataMap:
        for key, item in list(value.items()):
            dest[describe(key)], _ = self.copy(item)
        return dest

    def _merge_record(self, value: Any, dest: EventDataMap) -> EventDataMap:
        included = 0
        for name, item, tags in _safe_fields(value):
            if QUIET in tags:
                continue
            tree, zero = self.copy(item)
            if zero and ALWAYS not in tags:
                continue
            dest[name] = Scalar(HIDDEN_MARKER) if HIDDEN in tags else tree
            included += 1

        # An error with nothing to report is represented by its description.
        if included == 0 and isinstance(value, BaseException):
            dest[ERROR_KEY] = Scalar(describe(value))

        return dest

    def _copy_sequence(self, value: Any, dest: EventDataSequence) -> EventDataSequence:
        items = list(value)
        if isinstance(value, Set):
            try:
                items = sorted(items)
            except TypeError:
                pass
        for item in items:
            tree, _ = self.copy(item)
            dest.append(tree)
        return dest


def _has_fields(value: Any) -> bool:
    return dataclasses.is_dataclass(value) or bool(_public_vars(value))


def _safe_fields(value: Any) -> list[tuple[str, Any, frozenset[str]]]:
    fields = []
    iterator = _record_fields(value)
    while True:
        try:
            fields.append(next(iterator))
        except StopIteration:
            return fields
        except Exception as exc:
            fields.append(("<fields>", f"<unreadable: {describe(exc)}>", frozenset()))
            return fields


def _accumulate(dest: EventDataMap, new: EventData) -> None:
    previous = dest.get(VALUE_KEY)
    if previous is None:
        dest[VALUE_KEY] = new
    elif isinstance(previous, EventDataSequence):
        previous.append(new)
    else:
        dest[VALUE_KEY] = EventDataSequence([previous, new])


def aggregate(tree: EventDataMap | None, value: Any) -> EventDataMap:
    """Merge ``value`` into ``tree`` and return it.

    A new map is created when ``tree`` is None. Colliding keys are
    overwritten by ``value``.
    """
    if tree is None:
        tree = EventDataMap()
    return _Aggregator().merge(tree, value)


def aggregate_all(*values: Any) -> EventDataMap:
    """Fold ``values`` left to right into a new map; later values win."""
    tree = EventDataMap()
    aggregator = _Aggregator()
    for value in values:
        aggregator.merge(tree, value)
    return tree


def copy_value(value: Any) -> tuple[EventData, bool]:
    """Convert ``value`` into a standalone tree, returning ``(tree, zero)``."""
    return _Aggregator().copy(value)
