"""
Field value variants.

Rules never inspect Python types directly. Every field value reaches them as a
FieldValue: the value plus an explicit FieldKind naming which of the supported
categories it belongs to. The record driver derives the kind from the field's
declared type with kind_for_annotation.
"""

import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, NewType, Optional, TypeVar, Union

T = TypeVar('T')

# Marks an int field as unsigned for kind derivation.
Unsigned = NewType('Unsigned', int)


class FieldKind(Enum):
    SIGNED_INT = "signed_int"
    UNSIGNED_INT = "unsigned_int"
    FLOAT = "float"
    TEXT = "text"
    REFERENCE = "reference"
    OTHER = "other"


NUMERIC_KINDS = frozenset({FieldKind.SIGNED_INT, FieldKind.UNSIGNED_INT, FieldKind.FLOAT})

# Python types a value of each kind may hold; bool is excluded separately.
_ACCEPTED_TYPES = {
    FieldKind.SIGNED_INT: int,
    FieldKind.UNSIGNED_INT: int,
    FieldKind.FLOAT: (int, float),
    FieldKind.TEXT: str,
}


class Reference(Generic[T]):
    """
    One level of indirection.

    ``target`` is None when the reference is absent, otherwise the referenced
    value, which may itself be a Reference.
    """

    __slots__ = ('target',)

    def __init__(self, target: Optional[Any] = None) -> None:
        self.target = target

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Reference):
            return NotImplemented
        return self.target == other.target

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Reference({self.target!r})"


@dataclass(frozen=True)
class FieldValue:
    """A field's current value tagged with its kind."""

    kind: FieldKind
    value: Any

    def __post_init__(self):
        accepted = _ACCEPTED_TYPES.get(self.kind)
        if accepted is not None and (
                isinstance(self.value, bool) or not isinstance(self.value, accepted)):
            raise TypeError(
                f"{self.kind.value} field cannot hold {type(self.value).__name__} value {self.value!r}"
            )
        if self.kind == FieldKind.UNSIGNED_INT and self.value < 0:
            raise ValueError(f"Unsigned field value cannot be negative: {self.value}")

    @classmethod
    def signed(cls, value: int) -> "FieldValue":
        return cls(FieldKind.SIGNED_INT, value)

    @classmethod
    def unsigned(cls, value: int) -> "FieldValue":
        return cls(FieldKind.UNSIGNED_INT, value)

    @classmethod
    def floating(cls, value: float) -> "FieldValue":
        return cls(FieldKind.FLOAT, value)

    @classmethod
    def text(cls, value: str) -> "FieldValue":
        return cls(FieldKind.TEXT, value)

    @classmethod
    def reference(cls, value: Optional[Any]) -> "FieldValue":
        return cls(FieldKind.REFERENCE, value)

    @classmethod
    def other(cls, value: Any) -> "FieldValue":
        return cls(FieldKind.OTHER, value)

    @classmethod
    def from_annotation(cls, annotation: Any, value: Any) -> "FieldValue":
        return cls(kind_for_annotation(annotation), value)


def _is_optional(annotation: Any) -> bool:
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return type(None) in typing.get_args(annotation)
    return False


def kind_for_annotation(annotation: Any) -> FieldKind:
    """
    Derive the FieldKind of a declared field type.

    ``bool`` maps to OTHER although it subclasses ``int``.
    ``Annotated`` wrappers are looked through.
    """
    if typing.get_origin(annotation) is typing.Annotated:
        annotation = typing.get_args(annotation)[0]

    if annotation is Unsigned:
        return FieldKind.UNSIGNED_INT
    if annotation is bool:
        return FieldKind.OTHER
    if annotation is int:
        return FieldKind.SIGNED_INT
    if annotation is float:
        return FieldKind.FLOAT
    if annotation is str:
        return FieldKind.TEXT
    if annotation is Reference or typing.get_origin(annotation) is Reference:
        return FieldKind.REFERENCE
    if _is_optional(annotation):
        return FieldKind.REFERENCE
    return FieldKind.OTHER
