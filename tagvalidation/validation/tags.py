"""
Tag model: parsing of per-field rule metadata.

A field's metadata is one string such as ``"max=10,required,name=Age"``. It is
split on the entry separator, and each entry is split on the first key/value
separator. Nothing is trimmed or unescaped, and an empty entry still yields a
tag with an empty key, so ``""`` parses to exactly one empty tag.
"""

from typing import Iterator, List, Optional, Sequence, Tuple, Union, overload

DEFAULT_SEPARATOR = ","
DEFAULT_VALUE_SEPARATOR = "="


class Tag:
    """
    One parsed metadata entry.

    ``key`` and ``value`` are fixed at construction. The failed flag is the
    only mutable state and is written by the failure sink under its lock.
    """

    __slots__ = ('_key', '_value', '_has_failed')

    def __init__(self, key: str, value: str = "") -> None:
        self._key = key
        self._value = value
        self._has_failed = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def value(self) -> str:
        return self._value

    @property
    def has_failed(self) -> bool:
        # Unsynchronized read; use FieldContext.has_failed while a run is active.
        return self._has_failed

    def _mark_failed(self) -> None:
        self._has_failed = True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return self._key == other._key and self._value == other._value

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Tag(key={self._key!r}, value={self._value!r})"


class TagCollection(Sequence[Tag]):
    """Ordered, immutable sequence of tags in order of appearance."""

    __slots__ = ('_tags',)

    def __init__(self, tags: Sequence[Tag] = ()) -> None:
        self._tags: Tuple[Tag, ...] = tuple(tags)

    @classmethod
    def parse(cls, raw: str, separator: str = DEFAULT_SEPARATOR,
              value_separator: str = DEFAULT_VALUE_SEPARATOR) -> "TagCollection":
        return cls(parse_tags(raw, separator, value_separator))

    @overload
    def __getitem__(self, index: int) -> Tag: ...

    @overload
    def __getitem__(self, index: slice) -> "TagCollection": ...

    def __getitem__(self, index: Union[int, slice]) -> Union[Tag, "TagCollection"]:
        if isinstance(index, slice):
            return TagCollection(self._tags[index])
        return self._tags[index]

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._tags)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagCollection):
            return NotImplemented
        return self._tags == other._tags

    __hash__ = None  # type: ignore[assignment]

    def get(self, key: str) -> Optional[Tag]:
        """Return the first tag whose key equals ``key``, or None."""
        for tag in self._tags:
            if tag.key == key:
                return tag
        return None

    def contains(self, key: str) -> bool:
        return self.get(key) is not None

    def keys(self) -> List[str]:
        return [tag.key for tag in self._tags]

    def __repr__(self) -> str:
        return f"TagCollection({list(self._tags)!r})"


def parse_tags(raw: str, separator: str = DEFAULT_SEPARATOR,
               value_separator: str = DEFAULT_VALUE_SEPARATOR) -> List[Tag]:
    """
    Parse a raw metadata string into tags.

    Args:
        raw: Metadata string, empty if the field has none
        separator: Separator between entries
        value_separator: Separator between a key and its value; only the
            first occurrence splits, so values may contain it

    Returns:
        Tags in order of appearance, duplicates retained
    """
    tags = []
    for entry in raw.split(separator):
        key, found, value = entry.partition(value_separator)
        tags.append(Tag(key, value if found else ""))
    return tags
