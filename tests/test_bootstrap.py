from config import DEFAULT_SETTINGS
from utils import bootstrap as bootstrap_module
from utils.bootstrap import FALLBACK_ADMIN_PASSWORD, bootstrap
from utils.user_manager import UserManager

SETTING_COUNT = sum(len(entries) for entries in DEFAULT_SETTINGS.values())


def test_bootstrap_seeds_defaults(storage, monkeypatch):
    monkeypatch.setattr(bootstrap_module, "ADMIN_PASSWORD", "s3cret")
    report = bootstrap(storage)

    assert report.admin_created
    assert report.settings_created == SETTING_COUNT
    assert report.wiki_articles_created == 3

    admin = storage.get_user_by_username("admin")
    assert admin.role == "admin"
    assert UserManager(storage).authenticate("admin", "s3cret").id == admin.id
    assert storage.get_setting("eventDate").value == "May 15th, 2025"
    assert storage.get_all_wiki_categories() == ["Physics", "Chemistry", "Biology"]
    assert all(c.created_by == admin.id for c in storage.get_all_wiki_content())


def test_bootstrap_is_idempotent(storage):
    bootstrap(storage)
    report = bootstrap(storage)

    assert not report.admin_created
    assert report.settings_created == 0
    assert report.wiki_articles_created == 0
    assert len(storage.get_users()) == 1
    assert len(storage.get_all_settings()) == SETTING_COUNT
    assert len(storage.get_all_wiki_content()) == 3


def test_bootstrap_keeps_edited_settings(storage):
    bootstrap(storage)
    storage.update_setting("siteTitle", "Renamed")
    bootstrap(storage)
    assert storage.get_setting("siteTitle").value == "Renamed"


def test_admin_without_configured_password_can_log_in_with_default(storage, monkeypatch):
    monkeypatch.setattr(bootstrap_module, "ADMIN_PASSWORD", None)
    bootstrap(storage)

    admin = storage.get_user_by_username("admin")
    assert admin.password != FALLBACK_ADMIN_PASSWORD
    manager = UserManager(storage)
    assert manager.authenticate("admin", "password").id == admin.id
    assert manager.authenticate("admin", "Password") is None
