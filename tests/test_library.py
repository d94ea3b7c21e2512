import json

import pytest

from meridian.core.cache import SQLiteCache
from meridian.models.datatypes import ContentConfig, VerificationResult
from meridian.pipeline.library import CACHE_KEY_LIBRARY, SavedItemLibrary


def make_result(**overrides):
    fields = {"score": 91.0, "status": "Verified", "analysis": "Checks out.", "corrections": []}
    fields.update(overrides)
    return VerificationResult(**fields)


@pytest.fixture
def cache(tmp_path):
    return SQLiteCache(str(tmp_path / "cache.db"))


@pytest.fixture
def library(cache):
    return SavedItemLibrary(cache)


class TestSave:
    def test_empty_library(self, library):
        assert library.items() == []

    def test_save_content(self, library):
        brief = ContentConfig(topic="Restaking explained", style="Educational", tone="Bullish")

        item = library.save_content(brief, "gm")

        assert item.type == "CONTENT"
        assert item.title == "Restaking explained"
        assert item.content == "gm"
        assert item.tags == ["Educational", "Bullish"]
        assert item.id and item.created_at

    def test_save_report_truncates_title(self, library):
        text = "x" * 60

        item = library.save_report(text, make_result(status="Risky"))

        assert item.title == "x" * 50 + "..."
        assert item.tags == ["Risky"]

    def test_short_title_kept_whole(self, library):
        assert library.save_report("BTC hit 100k", make_result()).title == "BTC hit 100k"

    def test_ids_are_unique(self, library):
        first = library.save_content(ContentConfig(topic="a"), "1")
        second = library.save_content(ContentConfig(topic="a"), "1")
        assert first.id != second.id


class TestListing:
    def test_newest_first(self, library):
        library.save_content(ContentConfig(topic="first"), "1")
        library.save_content(ContentConfig(topic="second"), "2")
        library.save_report("third", make_result())

        assert [i.title for i in library.items()] == ["third", "second", "first"]

    def test_filter_by_type(self, library):
        library.save_content(ContentConfig(topic="draft"), "1")
        library.save_report("claim", make_result())

        assert [i.title for i in library.filter("CONTENT")] == ["draft"]
        assert [i.title for i in library.filter("report")] == ["claim"]
        assert len(library.filter("ALL")) == 2
        assert library.filter("MEMO") == []

    def test_report_content_survives_reload(self, cache, library):
        library.save_report("claim", make_result(score=40.0, status="Risky", corrections=["fix"]))

        reloaded = SavedItemLibrary(cache).items()[0]

        assert isinstance(reloaded.content, VerificationResult)
        assert reloaded.content.score == 40.0
        assert reloaded.content.corrections == ["fix"]

    def test_stored_oldest_first_with_camel_case_keys(self, cache, library):
        library.save_content(ContentConfig(topic="first"), "1")
        library.save_content(ContentConfig(topic="second"), "2")

        stored = json.loads(cache.get(CACHE_KEY_LIBRARY))

        assert [entry["title"] for entry in stored] == ["first", "second"]
        assert "createdAt" in stored[0]

    def test_unreadable_blob_is_empty(self, cache, library):
        cache.set(CACHE_KEY_LIBRARY, "{not json")
        assert library.items() == []

    def test_malformed_entries_are_dropped(self, cache, library):
        cache.set(CACHE_KEY_LIBRARY, json.dumps([
            {"id": "ok", "type": "CONTENT", "title": "kept", "content": "x", "createdAt": "", "tags": []},
            {"id": "", "type": "CONTENT"},
            {"id": "memo", "type": "MEMO"},
            "junk",
        ]))
        assert [i.id for i in library.items()] == ["ok"]


class TestDelete:
    def test_delete(self, library):
        keep = library.save_content(ContentConfig(topic="keep"), "1")
        drop = library.save_report("drop", make_result())

        assert library.delete(drop.id) is True
        assert [i.id for i in library.items()] == [keep.id]

    def test_delete_unknown_id(self, library):
        library.save_content(ContentConfig(topic="keep"), "1")

        assert library.delete("missing") is False
        assert len(library.items()) == 1
