"""
Tests for building resources out of chat message embeds.
"""

import pytest

from catalog.errors import MalformedEmbedError, ResourceValidationError
from catalog.models import EMBED_RESOURCE_TYPE_ID, ChatMessage
from catalog.normalization import build_resource, fingerprint, normalize_text

from tests.factories import make_message

PYTHON_DOCS = {
    "url": "  HTTPS://Docs.Python.org/3/  ",
    "title": "Python Docs",
    "description": "The Official Documentation",
}
RUST_BOOK = {
    "url": "https://doc.rust-lang.org/book/",
    "title": "The Rust Book",
    "description": "Learn Rust  ",
}


class TestDescription:
    """The description concatenates one fragment per embed."""

    def test_single_embed_fragment(self):
        resource = build_resource(make_message([PYTHON_DOCS]))

        assert resource.description == (
            "|url: https://docs.python.org/3/ + python docs + the official documentation"
        )

    def test_fragments_in_encounter_order(self):
        resource = build_resource(make_message([PYTHON_DOCS, RUST_BOOK]))

        assert resource.description == (
            "|url: https://docs.python.org/3/ + python docs + the official documentation"
            "|url: https://doc.rust-lang.org/book/ + the rust book + learn rust"
        )

    def test_reordering_embeds_changes_description(self):
        forward = build_resource(make_message([PYTHON_DOCS, RUST_BOOK]))
        backward = build_resource(make_message([RUST_BOOK, PYTHON_DOCS]))

        assert forward.description != backward.description
        assert forward.shash != backward.shash

    def test_result_is_lowercased_and_trimmed(self):
        embed = {"url": "https://a.example", "title": "ALL CAPS", "description": "Trailing   \n"}
        resource = build_resource(make_message([embed]))

        assert resource.description == resource.description.lower().strip()
        assert resource.description.endswith("trailing")

    def test_empty_strings_are_not_missing(self):
        embed = {"url": "https://a.example", "title": "", "description": ""}
        resource = build_resource(make_message([embed]))

        assert resource.description == "|url: https://a.example +  +"


class TestUrl:
    """Only the last embed's url survives."""

    def test_last_embed_wins(self):
        resource = build_resource(make_message([PYTHON_DOCS, RUST_BOOK]))
        assert resource.url == "https://doc.rust-lang.org/book/"

    def test_url_is_normalized(self):
        resource = build_resource(make_message([RUST_BOOK, PYTHON_DOCS]))
        assert resource.url == "https://docs.python.org/3/"


class TestMessageFields:
    def test_ids_and_type(self):
        resource = build_resource(make_message([PYTHON_DOCS], author_id=99, channel_id=1001))

        assert resource.user_id == "99"
        assert resource.channel_id == "1001"
        assert resource.type_id == EMBED_RESOURCE_TYPE_ID == 10

    def test_no_embeds_gives_empty_resource(self):
        resource = build_resource(make_message([]))

        assert resource.url == ""
        assert resource.description == ""
        assert resource.shash == fingerprint("")
        assert not resource.is_insertable()

    def test_unknown_embed_keys_ignored(self):
        message = ChatMessage.model_validate(
            {
                "author": {"id": "1", "username": "someone"},
                "channel_id": "2",
                "embeds": [dict(PYTHON_DOCS, type="rich", color=123)],
                "content": "look at this",
            }
        )
        resource = build_resource(message)
        assert resource.url == "https://docs.python.org/3/"

    def test_missing_author_gives_empty_user_id(self):
        message = ChatMessage.model_validate({"channel_id": 3, "embeds": [PYTHON_DOCS]})
        assert build_resource(message).user_id == ""


class TestFingerprint:
    def test_deterministic(self):
        text = "|url: https://x.example + x + y"
        assert fingerprint(text) == fingerprint(text)

    def test_fits_in_64_bits(self):
        value = int(fingerprint("anything at all"))
        assert 0 <= value < 2**64

    def test_shash_matches_description(self):
        first = build_resource(make_message([PYTHON_DOCS]))
        second = build_resource(make_message([PYTHON_DOCS], author_id=1, channel_id=2))

        assert first.shash == second.shash == fingerprint(first.description)

    def test_distinct_text_distinct_fingerprint(self):
        assert fingerprint("a") != fingerprint("b")

    def test_normalize_text(self):
        assert normalize_text("  MiXeD Case \t") == "mixed case"


class TestMalformedEmbeds:
    """Embeds lacking title, description or url."""

    def test_reject_raises_typed_error(self):
        broken = {"url": "https://a.example", "title": "no description"}

        with pytest.raises(MalformedEmbedError) as exc_info:
            build_resource(make_message([PYTHON_DOCS, broken]), on_malformed="reject")

        assert exc_info.value.index == 1
        assert exc_info.value.missing == ["description"]
        assert isinstance(exc_info.value, ResourceValidationError)
        assert isinstance(exc_info.value, ValueError)

    def test_null_field_counts_as_missing(self):
        broken = {"url": None, "title": "t", "description": "d"}

        with pytest.raises(MalformedEmbedError) as exc_info:
            build_resource(make_message([broken]), on_malformed="reject")

        assert exc_info.value.missing == ["url"]

    def test_skip_drops_embed(self):
        broken = {"title": "image only"}
        resource = build_resource(
            make_message([PYTHON_DOCS, broken]), on_malformed="skip"
        )
        expected = build_resource(make_message([PYTHON_DOCS]))

        assert resource.description == expected.description
        assert resource.url == expected.url

    def test_skip_all_embeds_gives_empty_resource(self):
        resource = build_resource(make_message([{"title": "x"}]), on_malformed="skip")
        assert resource.url == ""
        assert resource.description == ""

    def test_default_policy_from_settings(self, monkeypatch):
        from catalog.config import settings

        monkeypatch.setattr(settings, "EMBED_MALFORMED_POLICY", "skip")
        resource = build_resource(make_message([{"title": "x"}]))
        assert resource.description == ""

    def test_unknown_policy(self):
        with pytest.raises(ValueError, match="Unknown malformed embed policy"):
            build_resource(make_message([PYTHON_DOCS]), on_malformed="ignore")
