"""
Per-field validation context and the shared failure sink.

A FieldContext wraps one field of one record: its descriptor, its current
value, its parsed tags and its display name. Every context of one validation
run holds a reference to the same FailureSink, which is the only mutable state
shared between them. All writes to the sink go through its write lock; reading
a tag's failed flag takes the read lock, so readers do not block each other.
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Mapping, Optional

import structlog

from tagvalidation.config.settings import ValidationSettings, get_settings
from tagvalidation.validation.tags import Tag, TagCollection
from tagvalidation.validation.values import FieldValue

logger = structlog.get_logger("validation.context")


class ReadWriteLock:
    """
    Reader/writer lock built on a condition variable.

    Any number of readers may hold the lock together; a writer holds it alone.
    Waiting writers block new readers so a steady stream of reads cannot
    starve a write.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class FailureSink:
    """
    Append-only, thread-safe collection of failure messages for one run.

    Message order follows completion order; when fields are validated
    concurrently the order across fields is unspecified.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._messages: List[str] = []

    def record(self, message: str, tag: Optional[Tag] = None) -> None:
        """Mark ``tag`` as failed (if given) and append ``message``, atomically."""
        with self._lock.write_locked():
            if tag is not None:
                tag._mark_failed()
            self._messages.append(message)

    def is_failed(self, tag: Tag) -> bool:
        with self._lock.read_locked():
            return tag._has_failed

    def messages(self) -> List[str]:
        """Return a snapshot of the recorded messages."""
        with self._lock.read_locked():
            return list(self._messages)

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._messages)

    def __bool__(self) -> bool:
        return len(self) > 0

    def __iter__(self) -> Iterator[str]:
        return iter(self.messages())

    def __repr__(self) -> str:
        return f"FailureSink({self.messages()!r})"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Reflective handle on one field of a record type.

    ``metadata`` carries the rule tag string and, optionally, a display name,
    under the keys named by the settings (``validation`` and ``name`` by
    default).
    """

    name: str
    metadata: Mapping[str, Any] = field(default_factory=dict)
    annotation: Any = None


def _convert_case(char: str, converted: str) -> str:
    # Mappings that expand to several characters (e.g. "ß" -> "SS") keep the original.
    return converted if len(converted) == 1 else char


def format_field_name(name: str) -> str:
    """
    Turn an identifier into a display name.

    Only letters are considered. The first letter is upper-cased. A later
    upper-case letter that follows a lower-case letter starts a new lower-cased
    word; any other later upper-case letter is lower-cased and joins the
    current word. Later lower-case letters are kept. ``FirstName`` gives
    ``First name``, ``ID`` gives ``Id`` and ``HTTPServer`` gives ``Httpserver``.
    """
    parts = []
    position = 0
    previous_lower = False

    for char in name:
        if not char.isalpha():
            continue

        if char.isupper():
            if position == 0:
                parts.append(char)
            else:
                if previous_lower:
                    parts.append(' ')
                parts.append(_convert_case(char, char.lower()))
        elif char.islower():
            parts.append(_convert_case(char, char.upper()) if position == 0 else char)

        previous_lower = char.islower()
        position += 1

    return ''.join(parts)


class FieldContext:
    """
    Validation context for one field of one record instance.

    Everything except the shared sink is fixed at construction. Rules read the
    value and tags and report failures through set_failure; they must not
    mutate the value.

    Attributes:
        field (FieldDescriptor): Field descriptor
        field_value (FieldValue): Current value tagged with its kind
        formatted_field_name (str): Display name used in failure messages
        tags (TagCollection): Parsed rule tags in order of appearance
        failures (FailureSink): Sink shared by every context of the run
    """

    def __init__(
        self,
        field: FieldDescriptor,
        field_value: FieldValue,
        failures: FailureSink,
        settings: Optional[ValidationSettings] = None
    ) -> None:
        """
        Build the context and parse the field's metadata.

        Args:
            field: Field descriptor
            field_value: Current value tagged with its kind
            failures: Failure sink shared by the run
            settings: Metadata format settings, defaults to get_settings()
        """
        self.settings = settings or get_settings()
        self.field = field
        self.field_value = field_value
        self.failures = failures
        self.tags = self._load_tags()
        self.formatted_field_name = self._load_formatted_field_name()

    @property
    def field_name(self) -> str:
        return self.field.name

    def _load_tags(self) -> TagCollection:
        raw = self.field.metadata.get(self.settings.TAG_NAME, "")
        return TagCollection.parse(raw, self.settings.SEPARATOR, self.settings.VALUE_SEPARATOR)

    def _load_formatted_field_name(self) -> str:
        name_key = self.settings.NAME_KEY

        tag = self.tags.get(name_key)
        if tag is not None:
            return tag.value

        if name_key in self.field.metadata:
            return str(self.field.metadata[name_key])

        return format_field_name(self.field.name)

    def set_failure(self, tag: Optional[Tag], message: str) -> None:
        """Record ``message`` in the shared sink and mark ``tag`` as failed."""
        self.failures.record(message, tag)
        logger.debug("Validation failure recorded",
                     field=self.field.name,
                     rule=tag.key if tag is not None else None)

    def has_failed(self, tag: Tag) -> bool:
        return self.failures.is_failed(tag)

    def tag_from_key(self, key: str) -> Optional[Tag]:
        return self.tags.get(key)

    def contains_tag_key(self, key: str) -> bool:
        return self.tags.contains(key)

    def __repr__(self) -> str:
        return (f"FieldContext(field={self.field.name!r}, kind={self.field_value.kind.value}, "
                f"tags={self.tags.keys()!r})")
