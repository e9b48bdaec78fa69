import pytest

from notes_api.exceptions import ValidationError
from notes_api.schemas import MAX_NOTE_ID, NoteIn, parse_note_id


class TestParseNoteId:
    @pytest.mark.parametrize(
        "raw, expected",
        [("1", 1), ("42", 42), ("+7", 7), ("3.0", 3), ("007", 7), (str(MAX_NOTE_ID), MAX_NOTE_ID)],
    )
    def test_valid(self, raw, expected):
        assert parse_note_id(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["", "abc", "-1", "0", "0.0", "1.5", "1e2", " 1", "0x10", "\u0661", "\uff11", str(MAX_NOTE_ID + 1)],
    )
    def test_invalid(self, raw):
        with pytest.raises(ValidationError) as excinfo:
            parse_note_id(raw)
        assert excinfo.value.message == "Invalid id"
        assert excinfo.value.status_code == 400


class TestNoteIn:
    def test_trims_title_and_defaults_body(self):
        data = NoteIn.from_payload({"title": "  hello "})
        assert data.title == "hello"
        assert data.body == ""

    def test_ignores_unknown_fields(self):
        data = NoteIn.from_payload({"title": "t", "body": "b", "id": 99})
        assert (data.title, data.body) == ("t", "b")

    @pytest.mark.parametrize("payload", [None, [], "t", 1, {"title": " "}, {"title": 1}])
    def test_rejects(self, payload):
        with pytest.raises(ValidationError) as excinfo:
            NoteIn.from_payload(payload)
        assert excinfo.value.message == "Title is required"

    @pytest.mark.parametrize(
        "body, expected",
        [(None, ""), ("", ""), ("keep  spaces ", "keep  spaces "), (0, ""), (0.0, ""), (1.5, "1.5"), (7, "7"),
         (False, ""), (True, "true"), ([1, "a"], '[1, "a"]')],
    )
    def test_body_coercion(self, body, expected):
        assert NoteIn.from_payload({"title": "t", "body": body}).body == expected
