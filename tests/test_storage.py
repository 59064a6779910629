import re
from datetime import datetime, timedelta

import pytest
import pytz
from sqlalchemy.exc import OperationalError

from core.exceptions import DuplicateSettingError, DuplicateUsernameError, InfrastructureError
from schemas.registration import NewRegistration
from schemas.session import AuthSession, format_expiry
from schemas.setting import NewSetting
from schemas.user import NewUser
from schemas.wiki import NewWikiContent
from utils import db_storage, mem_storage
from utils.db_storage import DatabaseStorage
from utils.storage import generate_registration_id


def new_user(username="alice", **kwargs):
    return NewUser(username=username, password="not-a-real-hash", **kwargs)


def new_registration(user_id=None, **kwargs):
    data = {
        "user_id": user_id,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "participant_type": "student",
    }
    data.update(kwargs)
    return NewRegistration(**data)


def patch_id_generator(monkeypatch, ids):
    draws = iter(ids)

    def fake(now=None):
        return next(draws)

    monkeypatch.setattr(mem_storage, "generate_registration_id", fake)
    monkeypatch.setattr(db_storage, "generate_registration_id", fake)


# --- registration ids ---


def test_registration_id_format():
    now = datetime(2025, 5, 15, tzinfo=pytz.utc)
    for _ in range(50):
        assert re.fullmatch(r"SC2025-[1-9]\d{4}", generate_registration_id(now))


# --- users ---


def test_create_and_get_user(storage):
    user = storage.create_user(new_user(email="alice@example.com"))
    assert user.id > 0
    assert user.role == "user"
    assert storage.get_user(user.id) == user
    assert storage.get_user(user.id + 100) is None


def test_username_lookup_is_case_insensitive(storage):
    user = storage.create_user(new_user("Alice"))
    assert storage.get_user_by_username("alice").id == user.id
    assert storage.get_user_by_username("ALICE").id == user.id
    assert storage.get_user_by_username("bob") is None


def test_duplicate_username_rejected(storage):
    storage.create_user(new_user("alice"))
    with pytest.raises(DuplicateUsernameError):
        storage.create_user(new_user("ALICE"))
    assert len(storage.get_users()) == 1


def test_update_user_partial(storage):
    user = storage.create_user(new_user(first_name="Al"))
    updated = storage.update_user(user.id, {"last_name": "Smith", "id": 999})
    assert updated.id == user.id
    assert updated.first_name == "Al"
    assert updated.last_name == "Smith"
    assert storage.update_user(user.id + 100, {"last_name": "x"}) is None


def test_rename_onto_existing_username_rejected(storage):
    storage.create_user(new_user("alice"))
    bob = storage.create_user(new_user("bob"))
    with pytest.raises(DuplicateUsernameError):
        storage.update_user(bob.id, {"username": "Alice"})
    assert storage.get_user(bob.id).username == "bob"


def test_ids_are_not_reused(storage):
    first = storage.create_user(new_user("a"))
    assert storage.delete_user(first.id)
    second = storage.create_user(new_user("b"))
    assert second.id > first.id


def test_delete_user_clears_references(storage):
    user = storage.create_user(new_user())
    registration = storage.create_registration(new_registration(user_id=user.id))
    article = storage.create_wiki_content(
        NewWikiContent(title="T", content="c", category="Physics", created_by=user.id)
    )
    storage.create_session(AuthSession.start("sid-1", user.id, 3600))

    assert storage.delete_user(user.id)
    assert not storage.delete_user(user.id)
    assert storage.get_registration(registration.id).user_id is None
    assert storage.get_wiki_content(article.id).created_by is None
    assert storage.get_session("sid-1") is None


# --- registrations ---


def test_create_registration_assigns_ids(storage):
    registration = storage.create_registration(new_registration(activities=["Robotics"]))
    year = datetime.now(pytz.utc).year
    assert re.fullmatch(rf"SC{year}-\d{{5}}", registration.registration_id)
    assert registration.status == "confirmed"
    assert registration.activities == ["Robotics"]
    assert storage.get_registration_by_registration_id(registration.registration_id) == registration


def test_registrations_by_user(storage):
    alice = storage.create_user(new_user("alice"))
    bob = storage.create_user(new_user("bob"))
    storage.create_registration(new_registration(user_id=alice.id))
    storage.create_registration(new_registration(user_id=bob.id))
    storage.create_registration(new_registration())

    assert [r.user_id for r in storage.get_registrations_by_user(alice.id)] == [alice.id]
    assert len(storage.get_all_registrations()) == 3


def test_registration_id_collision_draws_again(storage, monkeypatch):
    patch_id_generator(monkeypatch, ["SC2025-11111", "SC2025-11111", "SC2025-22222"])
    first = storage.create_registration(new_registration())
    second = storage.create_registration(new_registration())
    assert first.registration_id == "SC2025-11111"
    assert second.registration_id == "SC2025-22222"


def test_registration_id_exhaustion_raises(storage, monkeypatch):
    patch_id_generator(monkeypatch, ["SC2025-11111"] * 10)
    storage.create_registration(new_registration())
    with pytest.raises(InfrastructureError):
        storage.create_registration(new_registration())
    assert len(storage.get_all_registrations()) == 1


def test_update_registration_keeps_registration_id(storage):
    registration = storage.create_registration(new_registration())
    updated = storage.update_registration(
        registration.id, {"status": "cancelled", "registration_id": "SC1999-00000"}
    )
    assert updated.status == "cancelled"
    assert updated.registration_id == registration.registration_id


def test_delete_registration(storage):
    registration = storage.create_registration(new_registration())
    assert storage.delete_registration(registration.id)
    assert storage.get_registration(registration.id) is None
    assert not storage.delete_registration(registration.id)


# --- wiki ---


def test_wiki_categories_are_distinct_and_case_insensitive_lookup(storage):
    storage.create_wiki_content(NewWikiContent(title="A", content="a", category="Physics"))
    storage.create_wiki_content(NewWikiContent(title="B", content="b", category="Chemistry"))
    storage.create_wiki_content(NewWikiContent(title="C", content="c", category="Physics"))

    assert storage.get_all_wiki_categories() == ["Physics", "Chemistry"]
    assert [c.title for c in storage.get_wiki_content_by_category("physics")] == ["A", "C"]


def test_wiki_categories_follow_deletes(storage):
    article = storage.create_wiki_content(NewWikiContent(title="A", content="a", category="Biology"))
    assert storage.delete_wiki_content(article.id)
    assert storage.get_all_wiki_categories() == []


def test_update_wiki_refreshes_last_updated(storage):
    article = storage.create_wiki_content(NewWikiContent(title="A", content="a", category="Physics"))
    updated = storage.update_wiki_content(article.id, {"title": "B"})
    assert updated.title == "B"
    assert updated.content == "a"
    assert updated.last_updated >= article.last_updated
    assert storage.update_wiki_content(article.id + 100, {"title": "x"}) is None


# --- settings ---


def test_settings(storage):
    storage.create_setting(NewSetting(name="siteTitle", value="Carnival", group="general"))
    storage.create_setting(NewSetting(name="primaryColor", value="#000", group="appearance"))

    assert storage.get_setting("siteTitle").value == "Carnival"
    assert [s.name for s in storage.get_settings_by_group("appearance")] == ["primaryColor"]
    assert storage.update_setting("siteTitle", "Fair").value == "Fair"
    assert storage.update_setting("missing", "x") is None
    assert storage.get_setting("missing") is None
    assert [s.name for s in storage.get_all_settings()] == ["siteTitle", "primaryColor"]


def test_duplicate_setting_name_rejected(storage):
    storage.create_setting(NewSetting(name="siteTitle", value="Carnival", group="general"))
    with pytest.raises(DuplicateSettingError):
        storage.create_setting(NewSetting(name="siteTitle", value="Other", group="email"))

    kept = storage.get_setting("siteTitle")
    assert (kept.value, kept.group) == ("Carnival", "general")
    assert len(storage.get_all_settings()) == 1


# --- sessions ---


def test_sessions(storage):
    user = storage.create_user(new_user())
    session = storage.create_session(AuthSession.start("sid-1", user.id, 3600))
    assert storage.get_session("sid-1") == session
    assert storage.delete_session("sid-1")
    assert not storage.delete_session("sid-1")
    assert storage.get_session("sid-1") is None


def test_delete_expired_sessions(storage):
    user = storage.create_user(new_user())
    now = datetime.now(pytz.utc)
    storage.create_session(AuthSession.start("live", user.id, 3600))
    storage.create_session(
        AuthSession(
            session_id="stale",
            user_id=user.id,
            expires_at=format_expiry(now - timedelta(seconds=1)),
        )
    )

    assert storage.delete_expired_sessions(now) == 1
    assert storage.get_session("stale") is None
    assert storage.get_session("live") is not None


# --- failures ---


class _BrokenSession:
    def __init__(self):
        self.rolled_back = False

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    get = _fail
    query = _fail
    add = _fail
    commit = _fail

    def rollback(self):
        self.rolled_back = True


def test_database_failures_become_infrastructure_errors():
    db = _BrokenSession()
    storage = DatabaseStorage(db)
    with pytest.raises(InfrastructureError):
        storage.get_user(1)
    with pytest.raises(InfrastructureError):
        storage.get_session("sid")
    assert db.rolled_back
