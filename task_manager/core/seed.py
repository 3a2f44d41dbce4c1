"""
Default data inserted at startup.

Ensures the admin user, the standard workflow statuses and a couple of labels
exist. Every step is idempotent so restarts against a persistent database are
safe.

Seed file format (YAML or JSON), both keys optional:
    statuses: [draft, to_review, to_be_fixed, to_publish, published]
    labels: [feature, bug]

Environment variable:
    TASK_MANAGER_SEED_FILE: path to the override file (optional).
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from task_manager.core.auth.passwords import hash_password
from task_manager.core.config import Settings
from task_manager.core.storage import Store

_log = logging.getLogger("task_manager.seed")

DEFAULT_STATUS_SLUGS = ["draft", "to_review", "to_be_fixed", "to_publish", "published"]
DEFAULT_LABELS = ["feature", "bug"]


def status_name_from_slug(slug: str) -> str:
    """'to_be_fixed' -> 'To be fixed'."""
    words = [w for w in slug.split("_") if w]
    if not words:
        return slug
    first = words[0][:1].upper() + words[0][1:]
    return " ".join([first, *words[1:]])


@dataclass
class SeedData:
    status_slugs: List[str] = field(default_factory=lambda: list(DEFAULT_STATUS_SLUGS))
    labels: List[str] = field(default_factory=lambda: list(DEFAULT_LABELS))


def _as_str_list(raw: Any, key: str, path: Path) -> Optional[List[str]]:
    if raw is None:
        return None
    if not isinstance(raw, list) or not all(isinstance(x, str) and x.strip() for x in raw):
        _log.warning("Ignoring %r in seed file %s: expected a list of non-empty strings", key, path)
        return None
    return [x.strip() for x in raw]


def load_seed_data(path: Optional[Path] = None) -> SeedData:
    """
    Load seed overrides from a YAML or JSON file.

    Missing or malformed files fall back to the built-in defaults.
    """
    data = SeedData()
    if path is None:
        return data
    if not path.exists():
        _log.warning("Seed file %s not found, using defaults", path)
        return data

    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        _log.warning("Cannot read seed file %s: %s", path, exc)
        return data

    try:
        raw: Dict[str, Any] = json.loads(raw_text)
    except json.JSONDecodeError:
        try:
            raw = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            _log.warning("Failed to parse seed file %s as JSON or YAML: %s", path, exc)
            return data

    if not isinstance(raw, dict):
        _log.warning("Seed file %s must be a mapping, got %s", path, type(raw).__name__)
        return data

    slugs = _as_str_list(raw.get("statuses"), "statuses", path)
    labels = _as_str_list(raw.get("labels"), "labels", path)
    if slugs is not None:
        data.status_slugs = slugs
    if labels is not None:
        data.labels = labels
    return data


def seed_defaults(store: Store, settings: Settings) -> Dict[str, int]:
    """Insert missing default rows. Returns how many rows of each kind were created."""
    data = load_seed_data(settings.seed_file)
    created = {"users": 0, "task_statuses": 0, "labels": 0}

    if store.users.find_by_email(settings.admin_email) is None:
        store.users.create(
            email=settings.admin_email,
            password_digest=hash_password(settings.admin_password),
        )
        created["users"] += 1

    for slug in data.status_slugs:
        if store.task_statuses.find_by_slug(slug) is None:
            store.task_statuses.create(name=status_name_from_slug(slug), slug=slug)
            created["task_statuses"] += 1

    for name in data.labels:
        if store.labels.find_by_name(name) is None:
            store.labels.create(name=name)
            created["labels"] += 1

    _log.info(
        "seed complete users=%d task_statuses=%d labels=%d",
        created["users"],
        created["task_statuses"],
        created["labels"],
    )
    return created
