"""Tests for DocumentStore – CRUD, collections, ambiguous state and failure paths."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import BaseModel

from local_store import (
    Entity,
    FileSystemError,
    EncodeError,
    LocalFileSystem,
    LocalStore,
    NotFoundError,
    StoreConfig,
    StoreResult,
)
from local_store.codec import REFERENCE_DATE


# ---------------------------------------------------------------------------
# Test entities
# ---------------------------------------------------------------------------

class Contact(Entity):
    namespace = "Contact"
    title: str = ""


class Event(Entity):
    namespace = "Event"
    name: str = ""
    at: datetime | None = None


class Preferences(Entity):
    namespace = "Preferences"
    theme: str = "light"


class Nameless(Entity):
    pass


class Stamp(BaseModel):
    at: datetime


class Log(Entity):
    namespace = "Log"
    at: datetime | None = None
    times: list[datetime] = []
    stamp: Stamp | None = None


class Settings(BaseModel):
    theme: str = "light"
    updated: datetime | None = None
    history: list[datetime] = []


def _ids(items):
    return {item.id for item in items}


# ---------------------------------------------------------------------------
# End-to-end
# ---------------------------------------------------------------------------

class TestEndToEnd:
    def test_save_list_delete_contact(self, store, tmp_path):
        documents = store.documents
        assert documents.save(Contact(id="a1", title="Foo"))

        fp = tmp_path / "documents" / "Contact" / "a1.json"
        assert fp.exists()
        assert json.loads(fp.read_text(encoding="utf-8")) == {"id": "a1", "title": "Foo"}

        assert documents.load_all(Contact) == [Contact(id="a1", title="Foo")]

        assert documents.delete(Contact(id="a1"))
        assert documents.load_all(Contact) == []


# ---------------------------------------------------------------------------
# save / get / round trip
# ---------------------------------------------------------------------------

class TestSave:
    def test_save_returns_path_and_instance(self, documents):
        c = Contact(id="c1", title="x")
        result = documents.save(c)
        assert isinstance(result, StoreResult)
        assert result.ok
        assert result.value is c
        assert result.path.name == "c1.json"

    def test_save_overwrites_same_id(self, documents):
        documents.save(Contact(id="c1", title="first"))
        documents.save(Contact(id="c1", title="second"))
        loaded = documents.load_all(Contact)
        assert len(loaded) == 1
        assert loaded[0].title == "second"

    def test_round_trip_with_iso_dates(self, documents):
        e = Event(id="e1", name="launch", at=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc))
        documents.save(e)
        assert documents.get(Event, "e1") == e

    def test_dates_are_written_as_iso8601(self, documents):
        result = documents.save(Event(id="e1", at=datetime(2024, 5, 1, tzinfo=timezone.utc)))
        data = json.loads(result.path.read_text(encoding="utf-8"))
        assert data["at"].startswith("2024-05-01T00:00:00")

    def test_numeric_dates_decode_with_default_profile(self, documents, store):
        folder = store.paths.ensure_type_dir("Event")
        (folder / "e2.json").write_text(json.dumps({"id": "e2", "name": "old", "at": 86400}))
        loaded = documents.get(Event, "e2")
        assert loaded.at == REFERENCE_DATE + timedelta(days=1)

    def test_numeric_dates_decode_in_lists_and_nested_models(self, documents, store):
        folder = store.paths.ensure_type_dir("Log")
        raw = {"id": "l1", "at": 86400, "times": [86400], "stamp": {"at": 86400}}
        (folder / "l1.json").write_text(json.dumps(raw))
        loaded = documents.get(Log, "l1")
        one_day = REFERENCE_DATE + timedelta(days=1)
        assert loaded.at == one_day
        assert loaded.times == [one_day]
        assert loaded.stamp.at == one_day

    def test_nested_dates_round_trip(self, documents):
        at = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        log = Log(id="l2", at=at, times=[at, at], stamp=Stamp(at=at))
        documents.save(log)
        assert documents.get(Log, "l2") == log

    def test_null_byte_in_id_raises_before_writing(self, documents, tmp_path):
        with pytest.raises(ValueError, match="Invalid"):
            documents.save(Contact(id="a\x00b"))
        assert not (tmp_path / "documents" / "Contact").exists()

    def test_get_missing_returns_none(self, documents):
        assert documents.get(Contact, "ghost") is None

    def test_extra_fields_survive(self, documents):
        documents.save(Contact(id="x1", title="t", nickname="nick"))
        loaded = documents.get(Contact, "x1")
        assert loaded.model_extra["nickname"] == "nick"

    def test_explicit_namespace_overrides_class(self, documents, tmp_path):
        documents.save(Contact(id="c1"), namespace="People")
        assert (tmp_path / "documents" / "People" / "c1.json").exists()
        assert documents.get(Contact, "c1", namespace="People").id == "c1"

    def test_missing_namespace_raises(self, documents):
        with pytest.raises(ValueError, match="namespace"):
            documents.save(Nameless(id="n1"))

    def test_exists(self, documents):
        c = Contact(id="c1")
        assert documents.exists(c) is False
        documents.save(c)
        assert documents.exists(c) is True


# ---------------------------------------------------------------------------
# Subfolders
# ---------------------------------------------------------------------------

class TestSubfolders:
    def test_save_into_subfolder(self, documents, tmp_path):
        documents.save(Contact(id="a1"), subfolder="archive")
        assert (tmp_path / "documents" / "Contact" / "archive" / "a1.json").exists()

    def test_load_all_is_scoped_to_folder(self, documents):
        documents.save(Contact(id="live"))
        documents.save(Contact(id="old"), subfolder="archive")
        assert _ids(documents.load_all(Contact)) == {"live"}
        assert _ids(documents.load_all(Contact, subfolder="archive")) == {"old"}

    def test_reset_subfolder_keeps_parent(self, documents):
        documents.save(Contact(id="live"))
        documents.save(Contact(id="old"), subfolder="archive")
        assert documents.reset_save_folder(Contact, subfolder="archive")
        assert documents.load_all(Contact, subfolder="archive") == []
        assert _ids(documents.load_all(Contact)) == {"live"}

    def test_invalid_subfolder_raises(self, documents):
        with pytest.raises(ValueError):
            documents.save(Contact(id="a"), subfolder="../escape")


# ---------------------------------------------------------------------------
# Named files (save_file / load_file)
# ---------------------------------------------------------------------------

class TestNamedFile:
    def test_save_and_load_file(self, documents, tmp_path):
        assert documents.save_file("session", Contact(id="s1", title="resume"))
        assert (tmp_path / "documents" / "session.json").exists()
        loaded = documents.load_file(Contact, "session")
        assert loaded == Contact(id="s1", title="resume")

    def test_none_instance_deletes_file(self, documents, tmp_path):
        documents.save_file("session", Contact(id="s1"))
        assert documents.save_file("session")
        assert not (tmp_path / "documents" / "session.json").exists()
        assert documents.load_file(Contact, "session") is None

    def test_none_instance_without_file_is_ok(self, documents):
        assert documents.save_file("never-written").ok

    def test_load_file_corrupt_returns_none(self, documents, store, store_logger):
        (store.paths.documents_root / "broken.json").write_text("{not json")
        assert documents.load_file(Contact, "broken") is None
        assert "failed" in store_logger.read()


# ---------------------------------------------------------------------------
# Single-slot values (save_single / load)
# ---------------------------------------------------------------------------

class TestSingle:
    def test_save_single_layout(self, documents, tmp_path):
        documents.save_single(Preferences(theme="dark"))
        assert (tmp_path / "documents" / "Preferences" / "Preferences.json").exists()

    def test_load_single(self, documents):
        documents.save_single(Preferences(id="p", theme="dark"))
        loaded = documents.load(Preferences)
        assert loaded.theme == "dark"

    def test_save_single_overwrites(self, documents):
        documents.save_single(Preferences(theme="dark"))
        documents.save_single(Preferences(theme="solarized"))
        assert documents.load(Preferences).theme == "solarized"

    def test_plain_model_with_numeric_dates(self, documents, store):
        folder = store.paths.ensure_type_dir("Settings")
        raw = {"theme": "dark", "updated": 86400, "history": [0, 86400]}
        (folder / "Settings.json").write_text(json.dumps(raw))
        loaded = documents.load(Settings, namespace="Settings")
        assert loaded.updated == REFERENCE_DATE + timedelta(days=1)
        assert loaded.history == [REFERENCE_DATE, REFERENCE_DATE + timedelta(days=1)]

    def test_plain_model_round_trip(self, documents):
        when = datetime(2023, 3, 4, 5, 6, tzinfo=timezone.utc)
        settings = Settings(theme="dark", updated=when, history=[when])
        assert documents.save_single(settings, namespace="Settings")
        assert documents.load(Settings, namespace="Settings") == settings

    def test_named_plain_model_with_numeric_dates(self, documents, tmp_path):
        (tmp_path / "documents").mkdir(exist_ok=True)
        (tmp_path / "documents" / "settings.json").write_text(json.dumps({"updated": 0, "history": [0]}))
        loaded = documents.load_file(Settings, "settings")
        assert loaded.updated == REFERENCE_DATE
        assert loaded.history == [REFERENCE_DATE]


# ---------------------------------------------------------------------------
# Ambiguous state
# ---------------------------------------------------------------------------

class TestAmbiguousState:
    def test_missing_folder_returns_none(self, documents):
        assert documents.load(Contact) is None

    def test_empty_folder_returns_none(self, documents, store):
        store.paths.ensure_type_dir("Contact")
        assert documents.load(Contact) is None

    def test_two_files_returns_none(self, documents, store_logger):
        documents.save(Contact(id="a"))
        documents.save(Contact(id="b"))
        assert documents.load(Contact) is None
        assert "found 2" in store_logger.read()

    def test_exactly_one_file_loads(self, documents):
        documents.save(Contact(id="only", title="one"))
        assert documents.load(Contact).title == "one"


# ---------------------------------------------------------------------------
# load_all partial success
# ---------------------------------------------------------------------------

class TestLoadAll:
    def test_missing_folder_is_empty(self, documents):
        assert documents.load_all(Contact) == []

    def test_skips_undecodable_files(self, documents, store, store_logger):
        documents.save(Contact(id="good"))
        folder = store.paths.type_dir("Contact")
        (folder / "bad.json").write_text("not json at all")
        (folder / "wrong.json").write_text(json.dumps({"id": "w", "title": ["not", "a", "string"]}))
        assert _ids(documents.load_all(Contact)) == {"good"}
        assert "bad.json failed" in store_logger.read()

    def test_ignores_hidden_files(self, documents, store):
        documents.save(Contact(id="good"))
        folder = store.paths.type_dir("Contact")
        (folder / ".DS_Store").write_text("junk")
        assert _ids(documents.load_all(Contact)) == {"good"}

    def test_results_in_filename_order(self, documents):
        for cid in ("c", "a", "b"):
            documents.save(Contact(id=cid))
        assert [c.id for c in documents.load_all(Contact)] == ["a", "b", "c"]


# ---------------------------------------------------------------------------
# save_collection
# ---------------------------------------------------------------------------

class TestSaveCollection:
    def test_reset_leaves_exactly_the_collection(self, documents):
        for cid in ("a", "b", "c"):
            documents.save(Contact(id=cid))
        result = documents.save_collection(Contact, [Contact(id="b"), Contact(id="d")])
        assert result
        assert result.value == 2
        assert _ids(documents.load_all(Contact)) == {"b", "d"}

    def test_without_reset_merges(self, documents):
        documents.save(Contact(id="a"))
        documents.save_collection(Contact, [Contact(id="b")], reset_save_folder=False)
        assert _ids(documents.load_all(Contact)) == {"a", "b"}

    def test_empty_collection_clears_folder(self, documents):
        documents.save(Contact(id="a"))
        assert documents.save_collection(Contact, [])
        assert documents.load_all(Contact) == []

    def test_collection_into_subfolder(self, documents):
        documents.save(Contact(id="root"))
        documents.save_collection(Contact, [Contact(id="s1")], subfolder="shared")
        assert _ids(documents.load_all(Contact, subfolder="shared")) == {"s1"}
        assert _ids(documents.load_all(Contact)) == {"root"}

    def test_failed_item_fails_result_but_others_saved(self, documents):
        items = [Contact(id="ok1"), Contact(id="bad", blob=object()), Contact(id="ok2")]
        result = documents.save_collection(Contact, items)
        assert not result
        assert result.value == 2
        assert isinstance(result.error, EncodeError)
        assert _ids(documents.load_all(Contact)) == {"ok1", "ok2"}


# ---------------------------------------------------------------------------
# Collection file
# ---------------------------------------------------------------------------

class TestCollectionFile:
    def test_round_trip(self, documents, tmp_path):
        items = [Contact(id="a", title="A"), Contact(id="b", title="B")]
        assert documents.save_collection_file(Contact, items)
        assert (tmp_path / "documents" / "Contact.json").exists()
        assert documents.load_collection(Contact) == items

    def test_missing_is_empty(self, documents):
        assert documents.load_collection(Contact) == []

    def test_corrupt_is_empty_and_logged(self, documents, store, store_logger):
        (store.paths.documents_root / "Contact.json").write_text("[{")
        assert documents.load_collection(Contact) == []
        assert "Could not decode collection data" in store_logger.read()

    def test_numeric_dates_in_collection(self, documents, store):
        raw = [{"id": "e1", "at": 0}, {"id": "e2", "at": 60}]
        (store.paths.documents_root / "Event.json").write_text(json.dumps(raw))
        loaded = documents.load_collection(Event)
        assert [e.at for e in loaded] == [REFERENCE_DATE, REFERENCE_DATE + timedelta(minutes=1)]

    def test_iso_dates_in_collection_use_fallback(self, documents):
        at = datetime(2023, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        documents.save_collection_file(Event, [Event(id="e1", at=at)])
        assert documents.load_collection(Event)[0].at == at


# ---------------------------------------------------------------------------
# update / delete / reset
# ---------------------------------------------------------------------------

class TestUpdateDelete:
    def test_update_replaces(self, documents):
        documents.save(Contact(id="u1", title="before"))
        assert documents.update(Contact(id="u1", title="after"))
        loaded = documents.load_all(Contact)
        assert len(loaded) == 1
        assert loaded[0].title == "after"

    def test_update_missing_creates(self, documents):
        assert documents.update(Contact(id="new", title="fresh"))
        assert documents.get(Contact, "new").title == "fresh"

    def test_delete_twice_never_raises(self, documents, store_logger):
        c = Contact(id="d1")
        documents.save(c)
        assert documents.delete(c)
        second = documents.delete(c)
        assert not second
        assert isinstance(second.error, NotFoundError)
        assert "does not exist" in store_logger.read()

    def test_unwrap_raises_carried_error(self, documents):
        result = documents.delete(Contact(id="ghost"))
        with pytest.raises(NotFoundError):
            result.unwrap()

    def test_reset_missing_folder_is_ok(self, documents):
        assert documents.reset_save_folder(Contact).ok

    def test_reset_removes_everything(self, documents, store):
        documents.save(Contact(id="a"))
        documents.save(Contact(id="b"), subfolder="sub")
        documents.reset_save_folder(Contact)
        assert not store.paths.type_dir("Contact").exists()


# ---------------------------------------------------------------------------
# Failure paths
# ---------------------------------------------------------------------------

class FailingWrites(LocalFileSystem):
    def write_bytes(self, path, data, atomic=True):
        raise FileSystemError("write", path, OSError("disk full"))


class TestFailures:
    def test_encode_failure_is_returned_and_logged(self, documents, store_logger):
        result = documents.save(Contact(id="bad", blob=object()))
        assert not result
        assert isinstance(result.error, EncodeError)
        assert "Could not encode data" in store_logger.read()

    def test_write_failure_is_returned_and_logged(self, tmp_path, store_logger):
        config = StoreConfig.rooted_at(tmp_path, log_to_stderr=False)
        store = LocalStore(config, logger=store_logger, file_system=FailingWrites())
        result = store.documents.save(Contact(id="a1"))
        assert not result
        assert isinstance(result.error, FileSystemError)
        assert "disk full" in store_logger.read()
        assert store.documents.get(Contact, "a1") is None

    def test_uncreatable_root_fails_at_write(self, tmp_path, store_logger):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a folder")
        config = StoreConfig.rooted_at(tmp_path, documents_root=blocker / "docs", log_to_stderr=False)
        store = LocalStore(config, logger=store_logger)
        result = store.documents.save(Contact(id="a1"))
        assert not result
        assert isinstance(result.error, FileSystemError)
        assert "Could not create directory" in store_logger.read()
