import json

import pytest

from task_manager.core.auth.passwords import verify_password
from task_manager.core.config import Settings
from task_manager.core.seed import (
    DEFAULT_LABELS,
    DEFAULT_STATUS_SLUGS,
    load_seed_data,
    seed_defaults,
    status_name_from_slug,
)
from task_manager.core.storage import Database, Store


@pytest.fixture()
def mem_store():
    store = Store(Database(":memory:").open())
    yield store
    store.close()


@pytest.mark.parametrize(
    "slug,name",
    [
        ("draft", "Draft"),
        ("to_review", "To review"),
        ("to_be_fixed", "To be fixed"),
        ("to_publish", "To publish"),
        ("published", "Published"),
    ],
)
def test_status_name_from_slug(slug, name):
    assert status_name_from_slug(slug) == name


def test_seed_creates_admin_statuses_and_labels(mem_store):
    created = seed_defaults(mem_store, Settings())
    assert created == {"users": 1, "task_statuses": 5, "labels": 2}

    admin = mem_store.users.find_by_email("hexlet@example.com")
    assert admin is not None
    assert verify_password("qwerty", admin.password_digest)

    assert [s.slug for s in mem_store.task_statuses.list()] == DEFAULT_STATUS_SLUGS
    assert [s.name for s in mem_store.task_statuses.list()] == [
        "Draft", "To review", "To be fixed", "To publish", "Published",
    ]
    assert [label.name for label in mem_store.labels.list()] == DEFAULT_LABELS


def test_seed_is_idempotent(mem_store):
    seed_defaults(mem_store, Settings())
    assert seed_defaults(mem_store, Settings()) == {"users": 0, "task_statuses": 0, "labels": 0}
    assert len(mem_store.users.list()) == 1


def test_seed_uses_configured_admin(mem_store):
    seed_defaults(mem_store, Settings(admin_email="root@corp.io", admin_password="s3cret"))
    admin = mem_store.users.find_by_email("root@corp.io")
    assert verify_password("s3cret", admin.password_digest)


def test_seed_file_yaml_override(mem_store, tmp_path):
    f = tmp_path / "seed.yaml"
    f.write_text("statuses:\n  - backlog\n  - in_progress\nlabels:\n  - chore\n", encoding="utf-8")

    seed_defaults(mem_store, Settings(seed_file=f))
    assert [(s.slug, s.name) for s in mem_store.task_statuses.list()] == [
        ("backlog", "Backlog"),
        ("in_progress", "In progress"),
    ]
    assert [label.name for label in mem_store.labels.list()] == ["chore"]


def test_load_json_partial_override(tmp_path):
    f = tmp_path / "seed.json"
    f.write_text(json.dumps({"labels": ["ops"]}), encoding="utf-8")
    data = load_seed_data(f)
    assert data.labels == ["ops"]
    assert data.status_slugs == DEFAULT_STATUS_SLUGS


def test_load_missing_file_returns_defaults(tmp_path):
    data = load_seed_data(tmp_path / "nope.yaml")
    assert data.status_slugs == DEFAULT_STATUS_SLUGS
    assert data.labels == DEFAULT_LABELS


def test_load_malformed_file_returns_defaults(tmp_path):
    f = tmp_path / "bad.yaml"
    f.write_text("this: is: not: valid: yaml:\n  {{{{", encoding="utf-8")
    assert load_seed_data(f).labels == DEFAULT_LABELS


def test_load_rejects_non_list_values(tmp_path):
    f = tmp_path / "seed.json"
    f.write_text(json.dumps({"statuses": "draft", "labels": ["", "x"]}), encoding="utf-8")
    data = load_seed_data(f)
    assert data.status_slugs == DEFAULT_STATUS_SLUGS
    assert data.labels == DEFAULT_LABELS


def test_load_non_mapping_returns_defaults(tmp_path):
    f = tmp_path / "list.json"
    f.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    assert load_seed_data(f).status_slugs == DEFAULT_STATUS_SLUGS
