"""
Unit Tests for Note Schemas.

Tests validation and normalization of note input.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from notekeeper.core.exceptions import ValidationFailure
from notekeeper.schemas.note import Note, NoteChanges, NoteDraft, parse_changes, parse_draft
from notekeeper.services.colors import NoteColor


class TestNote:
    """Tests for the Note record."""

    def test_normalizes_stored_values(self):
        """Should coerce legacy color and null content from stored rows."""
        note = Note.model_validate({
            "id": "abc",
            "title": None,
            "content": None,
            "color": "#EFF6FF",
            "pinned": False,
            "created_at": "2026-01-01T12:00:00+02:00",
            "updated_at": "2026-01-01T12:00:00",
            "user_id": "ignored",
        })

        assert note.color is NoteColor.BLUE
        assert note.content == ""
        assert note.created_at == datetime(2026, 1, 1, 10, 0, tzinfo=timezone.utc)
        assert note.updated_at.tzinfo is not None
        assert note.updated_at.utcoffset() == timedelta(0)

    def test_requires_id(self, note_factory):
        with pytest.raises(ValidationError):
            note_factory(id="")

    def test_frozen(self, note_factory):
        note = note_factory()

        with pytest.raises(ValidationError):
            note.title = "changed"

    def test_is_empty(self, note_factory):
        assert note_factory(title="  ", content="\n").is_empty
        assert not note_factory(title="t", content="").is_empty

    def test_matches_is_case_insensitive(self, note_factory):
        note = note_factory(title="Groceries", content="Milk and EGGS")

        assert note.matches("grocer")
        assert note.matches("eggs")
        assert not note.matches("bread")


class TestParseDraft:
    """Tests for parse_draft."""

    def test_trims_and_defaults(self):
        draft = parse_draft({"title": "  Hello  ", "content": None})

        assert draft.title == "Hello"
        assert draft.content == ""
        assert draft.color is NoteColor.DEFAULT
        assert draft.pinned is False

    def test_whitespace_title_becomes_none(self):
        draft = parse_draft({"title": "   ", "content": "body"})

        assert draft.title is None

    def test_rejects_empty_note(self):
        """Should raise ValidationFailure with field details."""
        with pytest.raises(ValidationFailure) as exc_info:
            parse_draft({"title": " ", "content": "  "})

        assert exc_info.value.code == "VAL_VALIDATION_ERROR"
        assert exc_info.value.details["errors"]

    def test_rejects_unknown_field(self):
        with pytest.raises(ValidationFailure):
            parse_draft({"content": "x", "archived": True})

    def test_rejects_bad_type(self):
        with pytest.raises(ValidationFailure):
            parse_draft({"content": "x", "pinned": "not-a-bool"})

    def test_legacy_pinned_flag(self):
        assert parse_draft({"content": "x", "is_pinned": True}).pinned is True

    def test_explicit_pinned_wins_over_legacy(self):
        assert parse_draft({"content": "x", "pinned": False, "is_pinned": True}).pinned is False

    def test_unknown_color_is_default(self):
        assert parse_draft({"content": "x", "color": "#000000"}).color is NoteColor.DEFAULT

    def test_passes_instances_through(self):
        draft = NoteDraft(content="x")

        assert parse_draft(draft) is draft


class TestParseChanges:
    """Tests for parse_changes."""

    def test_fields_are_sparse(self):
        changes = parse_changes({"pinned": True})

        assert changes.fields() == {"pinned": True}

    def test_explicit_none_title_is_kept(self):
        assert parse_changes({"title": None}).fields() == {"title": None}

    def test_normalizes_supplied_values(self):
        changes = parse_changes({"title": " x ", "color": "#FAF5FF", "is_pinned": False})

        assert changes.fields() == {"title": "x", "color": NoteColor.PURPLE, "pinned": False}

    def test_empty_change_set(self):
        assert parse_changes({}).fields() == {}

    def test_rejects_unknown_field(self):
        with pytest.raises(ValidationFailure) as exc_info:
            parse_changes({"id": "other"})

        assert exc_info.value.details["errors"][0]["field"] == "id"

    def test_passes_instances_through(self):
        changes = NoteChanges(content="x")

        assert parse_changes(changes) is changes
