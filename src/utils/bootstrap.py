"""Startup seeding of the default admin, site settings and wiki articles.

Every step checks for existing data first, so running ``bootstrap`` on every
process start is safe.
"""

import logging
from dataclasses import dataclass

from config import ADMIN_PASSWORD, DEFAULT_ADMIN_USERNAME, DEFAULT_SETTINGS
from schemas.setting import NewSetting
from schemas.wiki import NewWikiContent
from utils.storage import Storage
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)

# Used when ADMIN_PASSWORD is unset; matches the first deployment's seeded login.
FALLBACK_ADMIN_PASSWORD = "password"

DEFAULT_WIKI_ARTICLES = [
    {
        "title": "Physics: The Science of Motion",
        "category": "Physics",
        "content": """<p>Physics is the natural science that studies matter, its fundamental constituents, its motion and behavior through space and time, and the related entities of energy and force.</p>

<h3>Newton's Laws of Motion</h3>
<p>Isaac Newton's three laws of motion describe the relationship between a body and the forces acting upon it, and its motion in response to those forces.</p>
<ol>
  <li><strong>First Law:</strong> An object at rest stays at rest and an object in motion stays in motion unless acted upon by an unbalanced force.</li>
  <li><strong>Second Law:</strong> Acceleration is proportional to the net force and inversely proportional to the mass of the object.</li>
  <li><strong>Third Law:</strong> For every action, there is an equal and opposite reaction.</li>
</ol>

<h3>Experiment: Demonstrating Inertia</h3>
<div>
  <h4>Materials Needed:</h4>
  <ul>
    <li>A smooth table or surface</li>
    <li>A small, heavy object (like a coin)</li>
    <li>A piece of card paper</li>
  </ul>
  <h4>Steps:</h4>
  <ol>
    <li>Place the card on a smooth surface</li>
    <li>Place the coin on top of the card</li>
    <li>Quickly pull the card horizontally</li>
    <li>Observe how the coin stays in place due to inertia</li>
  </ol>
</div>""",
    },
    {
        "title": "Introduction to Chemistry",
        "category": "Chemistry",
        "content": """<p>Chemistry is the scientific study of the properties and behavior of matter: the elements, the compounds they form, and the changes they undergo during reactions.</p>

<h3>States of Matter</h3>
<ul>
  <li><strong>Solid:</strong> Has a fixed shape and volume. Particles are closely packed together.</li>
  <li><strong>Liquid:</strong> Has a fixed volume but takes the shape of its container.</li>
  <li><strong>Gas:</strong> Has no fixed shape or volume. Particles are far apart and move freely.</li>
  <li><strong>Plasma:</strong> Similar to gas but contains a high number of electrons and ions.</li>
</ul>

<h3>Experiment: Creating a Chemical Reaction</h3>
<div>
  <h4>Materials Needed:</h4>
  <ul>
    <li>Baking soda</li>
    <li>Vinegar</li>
    <li>A clear container</li>
  </ul>
  <h4>Steps:</h4>
  <ol>
    <li>Place a few tablespoons of baking soda in the container</li>
    <li>Slowly pour vinegar into the container</li>
    <li>Observe the bubbling reaction as carbon dioxide gas is produced</li>
  </ol>
</div>""",
    },
    {
        "title": "Exploring Biology",
        "category": "Biology",
        "content": """<p>Biology is the scientific study of life. All organisms are made up of cells that process hereditary information encoded in genes, which can be transmitted to future generations.</p>

<h3>Cell Structure</h3>
<ul>
  <li><strong>Prokaryotic cells:</strong> Simpler cells without a nucleus, found in bacteria and archaea.</li>
  <li><strong>Eukaryotic cells:</strong> Cells with a nucleus and membrane-bound organelles, found in plants, animals, fungi, and protists.</li>
</ul>

<h3>Experiment: Observing Plant Cells</h3>
<div>
  <h4>Materials Needed:</h4>
  <ul>
    <li>A microscope (even a basic one)</li>
    <li>A thin piece of onion skin</li>
    <li>A glass slide and cover slip</li>
    <li>Water</li>
    <li>Tweezers</li>
  </ul>
  <h4>Steps:</h4>
  <ol>
    <li>Place a drop of water on the glass slide</li>
    <li>Using tweezers, place a small, thin piece of onion skin in the water</li>
    <li>Gently place the cover slip over the onion skin</li>
    <li>Observe the rectangular plant cells under the microscope</li>
  </ol>
</div>""",
    },
]


@dataclass
class BootstrapReport:
    admin_created: bool = False
    settings_created: int = 0
    wiki_articles_created: int = 0


def _ensure_admin(storage: Storage) -> bool:
    if storage.get_user_by_username(DEFAULT_ADMIN_USERNAME) is not None:
        return False

    profile = {
        "role": "admin",
        "email": "admin@tghbhs.edu",
        "first_name": "Admin",
        "last_name": "User",
    }
    password = ADMIN_PASSWORD or FALLBACK_ADMIN_PASSWORD
    UserManager(storage).create_user(
        username=DEFAULT_ADMIN_USERNAME, password=password, **profile
    )
    if not ADMIN_PASSWORD:
        logger.warning(
            "Seeded admin account '%s' with the default password '%s'; "
            "set ADMIN_PASSWORD or change it after first login",
            DEFAULT_ADMIN_USERNAME,
            FALLBACK_ADMIN_PASSWORD,
        )
    return True


def _ensure_settings(storage: Storage) -> int:
    created = 0
    for group, entries in DEFAULT_SETTINGS.items():
        for name, value in entries.items():
            if storage.get_setting(name) is None:
                storage.create_setting(NewSetting(name=name, value=value, group=group))
                created += 1
    return created


def _ensure_wiki(storage: Storage, author_id) -> int:
    if storage.get_all_wiki_categories():
        return 0
    for article in DEFAULT_WIKI_ARTICLES:
        storage.create_wiki_content(NewWikiContent(created_by=author_id, **article))
    return len(DEFAULT_WIKI_ARTICLES)


def bootstrap(storage: Storage) -> BootstrapReport:
    """Seed default data that is missing. Safe to call repeatedly."""
    report = BootstrapReport()
    report.admin_created = _ensure_admin(storage)
    report.settings_created = _ensure_settings(storage)

    admin = storage.get_user_by_username(DEFAULT_ADMIN_USERNAME)
    report.wiki_articles_created = _ensure_wiki(storage, admin.id if admin else None)

    logger.info(
        "Bootstrap complete: admin_created=%s settings_created=%d wiki_articles_created=%d",
        report.admin_created,
        report.settings_created,
        report.wiki_articles_created,
    )
    return report
