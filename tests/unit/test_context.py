"""
Field context and failure sink tests.

Covers display-name derivation and precedence, failure reporting, the failed
flag and concurrent use of one sink from many threads.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from tagvalidation.validation.context import (
    FailureSink,
    FieldContext,
    FieldDescriptor,
    ReadWriteLock,
    format_field_name,
)
from tagvalidation.validation.tags import Tag
from tagvalidation.validation.values import FieldValue


@pytest.mark.unit
class TestFormatFieldName:
    """Test identifier to display-name derivation."""

    @pytest.mark.parametrize("identifier, expected", [
        ("FirstName", "First name"),
        ("ID", "Id"),
        ("aB", "A b"),
        ("", ""),
        ("name", "Name"),
        ("first_name", "Firstname"),
        ("HTTPServer", "Httpserver"),
        ("UserID", "User id"),
        ("parseHTMLDoc", "Parse htmldoc"),
    ])
    def test_letter_runs(self, identifier, expected):
        """Test letter-only word boundary insertion."""
        assert format_field_name(identifier) == expected

    @pytest.mark.parametrize("identifier, expected", [
        ("Address2Line", "Address line"),
        ("Line2", "Line"),
        ("2ndPlace", "Nd place"),
        ("utf8Value", "Utf value"),
        ("123", ""),
    ])
    def test_digits_are_dropped(self, identifier, expected):
        """Test digits neither appear nor count as the first letter."""
        assert format_field_name(identifier) == expected

    def test_leading_underscore_ignored(self):
        """Test non-letter prefixes do not shift the capitalised position."""
        assert format_field_name("_userName") == "User name"

    @pytest.mark.parametrize("identifier, expected", [
        ("ßeta", "ßeta"),
        ("Straße", "Straße"),
        ("aİ", "A İ"),
    ])
    def test_multi_character_case_mappings_keep_letter(self, identifier, expected):
        """Test letters whose case mapping expands are emitted unchanged."""
        assert format_field_name(identifier) == expected


@pytest.mark.unit
class TestFieldContextDisplayName:
    """Test display-name precedence on context construction."""

    def test_name_tag_wins(self, make_context):
        """Test the name directive in the tag beats the metadata entry."""
        context = make_context("FirstName", FieldValue.text("x"),
                               tag="required,name=Given name", display_name="Forename")

        assert context.formatted_field_name == "Given name"

    def test_metadata_name_used_without_tag(self, make_context):
        """Test the separate name metadata entry is the second choice."""
        context = make_context("FirstName", FieldValue.text("x"),
                               tag="required", display_name="Forename")

        assert context.formatted_field_name == "Forename"

    def test_derived_from_identifier(self, make_context):
        """Test the identifier is formatted when no name is given."""
        context = make_context("FirstName", FieldValue.text("x"), tag="required")

        assert context.formatted_field_name == "First name"

    def test_empty_name_tag_is_respected(self, make_context):
        """Test an explicit empty name directive yields an empty display name."""
        context = make_context("FirstName", FieldValue.text("x"), tag="name")

        assert context.formatted_field_name == ""

    def test_missing_metadata_parses_empty_tag(self, sink, settings):
        """Test a field without metadata gets one empty tag."""
        context = FieldContext(FieldDescriptor("Age"), FieldValue.signed(1), sink, settings)

        assert len(context.tags) == 1
        assert context.tags[0].key == ""


@pytest.mark.unit
class TestFailureReporting:
    """Test set_failure and has_failed."""

    def test_set_failure_marks_tag_and_appends(self, make_context, sink):
        """Test failure recording marks the tag and stores the message."""
        context = make_context("Age", FieldValue.signed(11), tag="max=10")
        tag = context.tag_from_key("max")

        assert not context.has_failed(tag)
        context.set_failure(tag, "Age cannot be greater than 10.")

        assert context.has_failed(tag)
        assert sink.messages() == ["Age cannot be greater than 10."]

    def test_set_failure_without_tag(self, make_context, sink):
        """Test a failure may be recorded without a tag."""
        context = make_context("Age", FieldValue.signed(11), tag="max=10")

        context.set_failure(None, "Record rejected.")

        assert sink.messages() == ["Record rejected."]
        assert not context.has_failed(context.tags[0])

    def test_contexts_share_one_sink(self, make_context, sink):
        """Test every context of a run appends to the same sink."""
        first = make_context("First", FieldValue.text(""), tag="required")
        second = make_context("Second", FieldValue.text(""), tag="required")

        first.set_failure(first.tags[0], "First required.")
        second.set_failure(second.tags[0], "Second required.")

        assert len(sink) == 2
        assert first.failures is second.failures

    def test_tag_queries(self, make_context):
        """Test tag lookup helpers on the context."""
        context = make_context("Age", FieldValue.signed(1), tag="max=10,required")

        assert context.contains_tag_key("required")
        assert not context.contains_tag_key("min")
        assert context.tag_from_key("max").value == "10"

    def test_messages_is_a_snapshot(self, sink):
        """Test mutating a snapshot does not affect the sink."""
        sink.record("one")
        snapshot = sink.messages()
        snapshot.append("two")

        assert sink.messages() == ["one"]
        assert bool(sink)
        assert not FailureSink()


@pytest.mark.concurrency
class TestFailureSinkConcurrency:
    """Test the sink under concurrent writers and readers."""

    def test_no_message_lost(self, make_context, sink):
        """Test N concurrent set_failure calls leave exactly N messages."""
        writers = 32
        per_writer = 250
        contexts = [make_context(f"Field{i}", FieldValue.text(""), tag="required")
                    for i in range(writers)]
        barrier = threading.Barrier(writers)

        def write(context):
            barrier.wait()
            for n in range(per_writer):
                context.set_failure(context.tags[0], f"{context.field_name} #{n}")

        with ThreadPoolExecutor(max_workers=writers) as executor:
            list(executor.map(write, contexts))

        messages = sink.messages()
        assert len(messages) == writers * per_writer
        assert len(set(messages)) == writers * per_writer
        assert all(context.has_failed(context.tags[0]) for context in contexts)

    def test_readers_run_alongside_each_other(self):
        """Test two readers can hold the read lock at the same time."""
        lock = ReadWriteLock()
        both_inside = threading.Barrier(2, timeout=5)

        def read():
            with lock.read_locked():
                both_inside.wait()

        threads = [threading.Thread(target=read) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert not both_inside.broken

    def test_writer_excludes_readers(self):
        """Test a reader waits while a writer holds the lock."""
        lock = ReadWriteLock()
        events = []
        writer_inside = threading.Event()
        release_writer = threading.Event()

        def write():
            with lock.write_locked():
                writer_inside.set()
                release_writer.wait(timeout=5)
                events.append("write-done")

        def read():
            with lock.read_locked():
                events.append("read")

        writer = threading.Thread(target=write)
        writer.start()
        writer_inside.wait(timeout=5)
        reader = threading.Thread(target=read)
        reader.start()
        reader.join(timeout=0.2)

        assert events == []
        release_writer.set()
        writer.join(timeout=5)
        reader.join(timeout=5)
        assert events == ["write-done", "read"]

    def test_read_flag_is_consistent_under_writes(self, sink):
        """Test is_failed never errors while writers append."""
        tags = [Tag("required") for _ in range(100)]

        def write(tag):
            sink.record("failed", tag)

        def read(tag):
            return sink.is_failed(tag)

        with ThreadPoolExecutor(max_workers=16) as executor:
            list(executor.map(write, tags))
            flags = list(executor.map(read, tags))

        assert all(flags)
        assert len(sink) == 100
