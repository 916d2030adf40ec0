"""
Sensitive-data redaction for failure payloads.

Produces a sanitized deep copy of arbitrarily nested data before it is
persisted to the dead-letter queue, written to logs, or shown in admin
views. Values under keys that look sensitive are replaced with a sentinel;
back-references to a container already on the current path are replaced
with a cycle sentinel.

Mappings, pydantic models, dataclass instances, named tuples and plain
objects are rebuilt as dicts keyed by their fields. Other sequences and
sets are rebuilt as lists.

Traversal uses an explicit work stack, so payload depth is bounded by
memory rather than the interpreter recursion limit.
"""

import dataclasses
import re
from collections.abc import Mapping, Sequence, Set
from enum import Enum
from types import ModuleType
from typing import Any, Iterable, Iterator, Optional

from pydantic import BaseModel

REDACTED = "[REDACTED]"
CIRCULAR = "[CIRCULAR]"
MASKED_PHONE = "[MASKED_PHONE]"

SENSITIVE_KEY_PATTERNS: tuple[str, ...] = (
    "password",
    "token",
    "secret",
    "api_key",
    "apikey",
    "authorization",
    "cookie",
    "access",
    "refresh",
    "credential",
    "client_secret",
    "private_key",
)

PHONE_KEY_PATTERNS: tuple[str, ...] = ("phone", "msisdn", "mobile", "contact")

PHONE_VALUE_PATTERN = re.compile(r"^\+?\d{8,15}$")

_NON_DIGITS = re.compile(r"\D")

# Iterable but never descended into
_TEXT_TYPES = (str, bytes, bytearray)

# Carry a __dict__ but are not data
_OPAQUE_TYPES = (type, ModuleType, Enum, BaseException)


def _normalize_key(key: Any) -> str:
    return str(key).strip().lower()


def is_sensitive_key(key: Any, patterns: Iterable[str] = SENSITIVE_KEY_PATTERNS) -> bool:
    """
    Check whether a mapping key names sensitive data.

    Substring match on the trimmed, lower-cased key. Deliberately broad:
    ``access_granted_at`` is redacted as well.
    """
    normalized = _normalize_key(key)
    return any(pattern in normalized for pattern in patterns)


def is_phone_key(key: Any) -> bool:
    normalized = _normalize_key(key)
    return any(pattern in normalized for pattern in PHONE_KEY_PATTERNS)


def mask_phone_number(value: str) -> str:
    """
    Mask a phone number, keeping the first and last two digits.

    Examples:
        >>> mask_phone_number("+27821234567")
        '27*******67'
        >>> mask_phone_number("123")
        '[MASKED_PHONE]'
    """
    digits = _NON_DIGITS.sub("", value)
    if len(digits) < 6:
        return MASKED_PHONE

    return f"{digits[:2]}{'*' * max(2, len(digits) - 4)}{digits[-2:]}"


def _is_named_tuple(value: Any) -> bool:
    return isinstance(value, tuple) and hasattr(type(value), "_fields")


def is_record_object(value: Any) -> bool:
    """
    Check whether an object is walked field by field.

    Pydantic models, dataclass instances and objects carrying a
    ``__dict__`` qualify. Classes, modules, enum members, exceptions and
    callables do not.
    """
    if isinstance(value, BaseModel):
        return True
    if dataclasses.is_dataclass(value):
        return not isinstance(value, type)
    if isinstance(value, _OPAQUE_TYPES) or callable(value):
        return False
    return hasattr(value, "__dict__")


def _record_entries(value: Any) -> Iterator[tuple[Any, Any]]:
    """(field name, value) pairs of a named tuple or record object."""
    if _is_named_tuple(value):
        return zip(type(value)._fields, value)
    if isinstance(value, BaseModel):
        # Declared fields plus extras; private attributes are skipped
        return iter(value)
    if dataclasses.is_dataclass(value):
        return (
            (field.name, getattr(value, field.name))
            for field in dataclasses.fields(value)
        )
    return iter(vars(value).items())


class _Frame:
    """One container being rebuilt: its entry iterator and output."""

    __slots__ = ("node_id", "entries", "output", "is_mapping")

    def __init__(self, node: Any, entries: Iterator[tuple[Any, Any]], output: Any):
        self.node_id = id(node)
        self.entries = entries
        self.output = output
        self.is_mapping = isinstance(output, dict)

    def store(self, key: Any, value: Any) -> None:
        if self.is_mapping:
            self.output[key] = value
        else:
            self.output.append(value)


class Redactor:
    """
    Configurable redaction walker.

    Args:
        extra_patterns: Additional sensitive key substrings (lower-case)
        mask_phone_numbers: Mask phone-like keys and phone-shaped strings
        mapping_types: Types treated as keyed mappings and descended into
        descend_objects: Also walk pydantic models, dataclasses, named
            tuples and plain objects by their fields. When disabled these
            pass through unchanged, as do mappings outside ``mapping_types``.

    Example:
        >>> Redactor().redact({"user": "ada", "password": "hunter2"})
        {'user': 'ada', 'password': '[REDACTED]'}
    """

    def __init__(
        self,
        extra_patterns: Iterable[str] = (),
        mask_phone_numbers: bool = False,
        mapping_types: tuple[type, ...] = (Mapping,),
        descend_objects: bool = True,
    ):
        extra = tuple(p.strip().lower() for p in extra_patterns if p and p.strip())
        self.patterns: tuple[str, ...] = SENSITIVE_KEY_PATTERNS + tuple(
            p for p in extra if p not in SENSITIVE_KEY_PATTERNS
        )
        self.mask_phone_numbers = mask_phone_numbers
        self.mapping_types = mapping_types
        self.descend_objects = descend_objects

    def is_sensitive_key(self, key: Any) -> bool:
        return is_sensitive_key(key, self.patterns)

    def _redact_leaf(self, value: Any) -> Any:
        if (
            self.mask_phone_numbers
            and isinstance(value, str)
            and PHONE_VALUE_PATTERN.match(value)
        ):
            return mask_phone_number(value)
        return value

    def _redact_entry(self, key: Any, value: Any) -> Optional[tuple[Any]]:
        """Key-level replacement for a mapping entry, or None to descend."""
        if self.is_sensitive_key(key):
            return (REDACTED,)
        if self.mask_phone_numbers and isinstance(value, str) and is_phone_key(key):
            return (mask_phone_number(value),)
        return None

    def _open(self, value: Any) -> Optional[_Frame]:
        """Start rebuilding ``value``, or None when it is a leaf."""
        if isinstance(value, _TEXT_TYPES):
            return None
        if isinstance(value, self.mapping_types):
            return _Frame(value, iter(value.items()), {})
        if self.descend_objects and _is_named_tuple(value):
            return _Frame(value, _record_entries(value), {})
        if isinstance(value, (Sequence, Set)):
            return _Frame(value, enumerate(value), [])
        if self.descend_objects and is_record_object(value):
            return _Frame(value, _record_entries(value), {})
        return None

    def redact(self, value: Any) -> Any:
        """
        Return a redacted deep copy of ``value``.

        Sequences and sets come back as lists, with sequence order and
        length preserved. Mappings and walked objects come back as dicts in
        their original key order. The input is never mutated.
        """
        root = self._open(value)
        if root is None:
            return self._redact_leaf(value)

        on_path = {root.node_id}
        stack = [root]

        while stack:
            frame = stack[-1]
            entry = next(frame.entries, None)
            if entry is None:
                stack.pop()
                on_path.discard(frame.node_id)
                continue

            key, child = entry

            if frame.is_mapping:
                replacement = self._redact_entry(key, child)
                if replacement is not None:
                    frame.store(key, replacement[0])
                    continue

            if id(child) in on_path:
                frame.store(key, CIRCULAR)
                continue

            child_frame = self._open(child)
            if child_frame is None:
                frame.store(key, self._redact_leaf(child))
                continue

            frame.store(key, child_frame.output)
            on_path.add(child_frame.node_id)
            stack.append(child_frame)

        return root.output


_default_redactor = Redactor()


def redact_sensitive_data(value: Any) -> Any:
    """
    Redact sensitive values from arbitrarily nested data.

    Args:
        value: Scalar, container, model or plain object, possibly
            self-referential

    Returns:
        Freshly built copy with sensitive values replaced by "[REDACTED]"
        and cyclic back-references replaced by "[CIRCULAR]"
    """
    return _default_redactor.redact(value)


redact = redact_sensitive_data


__all__ = [
    "CIRCULAR",
    "MASKED_PHONE",
    "PHONE_KEY_PATTERNS",
    "PHONE_VALUE_PATTERN",
    "REDACTED",
    "SENSITIVE_KEY_PATTERNS",
    "Redactor",
    "is_phone_key",
    "is_record_object",
    "is_sensitive_key",
    "mask_phone_number",
    "redact",
    "redact_sensitive_data",
]
