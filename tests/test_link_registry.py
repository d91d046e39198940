import threading
import types

import pytest

from services.errors import DuplicateLinkError, NotFoundError
from services.link_registry import LinkRegistry
from services.models import Link


def make_link(link_id, task_id, event_id, notes=None):
    return Link(
        id=link_id,
        task_id=task_id,
        event_id=event_id,
        user_id="current_user",
        created_at="2025-01-15T09:00:00.000Z",
        updated_at="2025-01-15T09:00:00.000Z",
        notes=notes,
    )


def test_find_preserves_insertion_order_and_is_lazy(registry):
    registry.insert(make_link("l1", "t1", "e1"))
    registry.insert(make_link("l2", "t2", "e1"))
    registry.insert(make_link("l3", "t1", "e2"))

    view = registry.find(lambda link: link.task_id == "t1")

    assert isinstance(view, types.GeneratorType)
    assert [link.id for link in view] == ["l1", "l3"]


def test_get_and_find_pair(registry):
    registry.insert(make_link("l1", "t1", "e1"))

    assert registry.get("l1").event_id == "e1"
    assert registry.get("missing") is None
    assert registry.find_pair("t1", "e1").id == "l1"
    assert registry.find_pair("t1", "e2") is None


def test_insert_rejects_duplicate_pair(registry):
    registry.insert(make_link("l1", "t1", "e1"))

    with pytest.raises(DuplicateLinkError):
        registry.insert(make_link("l2", "t1", "e1"))
    assert len(registry) == 1


def test_removed_id_is_never_accepted_again(registry):
    registry.insert(make_link("l1", "t1", "e1"))
    registry.remove_by_id("l1")

    with pytest.raises(DuplicateLinkError):
        registry.insert(make_link("l1", "t2", "e2"))
    assert len(registry) == 0


def test_replace_keeps_position(registry):
    for index, task_id in enumerate(["t1", "t2", "t3"], start=1):
        registry.insert(make_link(f"l{index}", task_id, "e1"))

    registry.replace(make_link("l2", "t2", "e1", notes="prep"))

    assert [link.id for link in registry.snapshot()] == ["l1", "l2", "l3"]
    assert registry.get("l2").notes == "prep"


def test_replace_unknown_link_raises(registry):
    with pytest.raises(NotFoundError):
        registry.replace(make_link("nope", "t1", "e1"))


def test_remove_by_id_and_pair(registry):
    registry.insert(make_link("l1", "t1", "e1"))
    registry.insert(make_link("l2", "t2", "e2"))

    assert registry.remove_by_id("l1").id == "l1"
    assert registry.remove_by_id("l1") is None
    assert registry.remove_by_pair("t2", "e2").id == "l2"
    assert registry.remove_by_pair("t2", "e2") is None
    assert len(registry) == 0


def test_concurrent_inserts_of_same_pair_admit_exactly_one():
    registry = LinkRegistry()
    errors = []

    def worker(index):
        try:
            registry.insert(make_link(f"l{index}", "t1", "e1"))
        except DuplicateLinkError as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(registry) == 1
    assert len(errors) == 15


def test_concurrent_inserts_of_distinct_pairs_all_land():
    registry = LinkRegistry()

    def worker(offset):
        for i in range(50):
            registry.insert(make_link(f"l{offset}-{i}", f"t{offset}", f"e{i}"))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(registry) == 400
