"""Unit tests for field-level encryption of notes and categories."""

from unittest.mock import patch

import pytest

from personal_notes.errors import DecryptionError, EncryptionUnavailableError
from personal_notes.models import Category, Note
from personal_notes.security import FieldCodec


@pytest.fixture
def note() -> Note:
    return Note(
        id="n1",
        subject="Groceries",
        content="milk, eggs",
        priority="high",
        tags="home,errands",
        category_id="c1",
    )


class TestEncryptFields:
    def test_encrypts_only_sensitive_fields(self, codec: FieldCodec, note: Note) -> None:
        sealed = codec.encrypt_fields(note)

        assert sealed.sealed is True
        assert sealed.subject != note.subject
        assert sealed.content != note.content
        assert sealed.tags != note.tags
        assert sealed.priority == "high"
        assert sealed.category_id == "c1"
        assert sealed.id == "n1"

    def test_does_not_mutate_input(self, codec: FieldCodec, note: Note) -> None:
        codec.encrypt_fields(note)
        assert note.subject == "Groceries"
        assert note.sealed is False

    def test_empty_fields_are_sealed(self, codec: FieldCodec) -> None:
        sealed = codec.encrypt_fields(Note(subject="only subject"))

        assert sealed.content != ""
        assert sealed.tags != ""
        assert codec.decrypt_fields(sealed).content == ""

    def test_category_name(self, codec: FieldCodec) -> None:
        sealed = codec.encrypt_fields(Category(name="Work", id="c1"))
        assert sealed.name != "Work"
        assert codec.decrypt_fields(sealed).name == "Work"

    def test_already_sealed_raises(self, codec: FieldCodec, note: Note) -> None:
        sealed = codec.encrypt_fields(note)
        with pytest.raises(ValueError, match="already encrypted"):
            codec.encrypt_fields(sealed)

    def test_invalid_gate_raises_before_any_field(self, invalid_gate, note: Note) -> None:
        codec = FieldCodec(invalid_gate)

        with pytest.raises(EncryptionUnavailableError):
            codec.encrypt_fields(note)
        assert note.sealed is False


class TestDecryptFields:
    def test_roundtrip(self, codec: FieldCodec, note: Note) -> None:
        assert codec.decrypt_fields(codec.encrypt_fields(note)) == note

    def test_not_sealed_raises(self, codec: FieldCodec, note: Note) -> None:
        with pytest.raises(ValueError, match="not encrypted"):
            codec.decrypt_fields(note)

    def test_strict_failure_names_field(self, codec: FieldCodec, note: Note) -> None:
        sealed = codec.encrypt_fields(note)
        sealed.content = "plain legacy text"

        with pytest.raises(DecryptionError, match="content of note n1"):
            codec.decrypt_fields(sealed)

    def test_invalid_gate_raises(self, codec: FieldCodec, invalid_gate, note: Note) -> None:
        sealed = codec.encrypt_fields(note)

        with pytest.raises(EncryptionUnavailableError):
            FieldCodec(invalid_gate).decrypt_fields(sealed)


class TestDecryptFieldsLenient:
    def test_drops_entities_that_fail(self, codec: FieldCodec) -> None:
        good = codec.encrypt_fields(Note(id="a", subject="good"))
        bad = codec.encrypt_fields(Note(id="b", subject="bad"))
        bad.subject = "legacy plaintext"

        with patch("personal_notes.security.codec.log") as mock_log:
            result = codec.decrypt_fields_lenient([good, bad])

        assert [n.id for n in result] == ["a"]
        assert result[0].subject == "good"
        mock_log.warning.assert_called_once_with(
            "decryption_skipped", entity_type="note", entity_id="b"
        )

    def test_legacy_plaintext_never_surfaces(self, codec: FieldCodec) -> None:
        legacy = Note(id="old", subject="hello world", sealed=True)
        assert codec.decrypt_fields_lenient([legacy]) == []

    def test_invalid_gate_returns_empty(self, codec: FieldCodec, invalid_gate) -> None:
        sealed = codec.encrypt_fields(Note(subject="x"))

        with patch("personal_notes.security.codec.log") as mock_log:
            result = FieldCodec(invalid_gate).decrypt_fields_lenient([sealed])

        assert result == []
        mock_log.warning.assert_called_once_with("decryption_unavailable", skipped=1)

    def test_empty_input(self, codec: FieldCodec) -> None:
        assert codec.decrypt_fields_lenient([]) == []


class TestSafeDecrypt:
    def test_decrypts_valid_value(self, codec: FieldCodec) -> None:
        sealed = codec.encrypt_fields(Category(name="Work"))
        assert codec.safe_decrypt(sealed.name) == "Work"

    def test_returns_input_on_failure(self, codec: FieldCodec) -> None:
        assert codec.safe_decrypt("not encrypted") == "not encrypted"

    @pytest.mark.parametrize("value", ["", None])
    def test_empty_values(self, codec: FieldCodec, value) -> None:
        assert codec.safe_decrypt(value) == ""

    def test_invalid_gate_returns_input(self, invalid_gate) -> None:
        assert FieldCodec(invalid_gate).safe_decrypt("abcd") == "abcd"
