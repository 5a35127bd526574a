from uuid import uuid4

import pytest

from db.predicates import IsNull
from db.store import CatalogStore, StorageFailure
from models.sketch import ImageVariant, TextPosition
from utils.bible import InvalidReference
from utils.sharing import (
    apply_deletion,
    create_sketch,
    delete_sketch,
    effective_image,
    group_members,
    handle_deletion,
    link_reference,
    redraw_sketch,
    resolve_master,
)


def test_resolve_master_prefers_oldest_with_image(add_sketch):
    group = uuid4()
    linked = add_sketch(minutes=0, group=group)
    owner = add_sketch(minutes=5, image=b"png-a", group=group)
    newer_owner = add_sketch(minutes=10, image=b"png-b", group=group)

    assert resolve_master([newer_owner, linked, owner]).id == owner.id


def test_resolve_master_falls_back_to_oldest(add_sketch):
    first = add_sketch(minutes=0)
    second = add_sketch(minutes=3)

    assert resolve_master([second, first]).id == first.id
    assert resolve_master([]) is None


def test_adding_reference_keeps_master(store, add_sketch):
    group = uuid4()
    owner = add_sketch(minutes=0, image=b"png", drawing=b"ink", group=group)
    add_sketch(minutes=1, group=group, verse=17)
    before = resolve_master(group_members(store, owner))

    link_reference(store, "Faith", group, "Hebrews", 11, 1)

    after = resolve_master(group_members(store, owner))
    assert before.id == after.id == owner.id


def test_effective_image_inherits_from_group(store, add_sketch):
    group = uuid4()
    add_sketch(minutes=0, image=b"light", image_dark=b"dark", group=group)
    linked = add_sketch(minutes=1, group=group, verse=17)

    assert effective_image(store, linked) == b"light"
    assert effective_image(store, linked, ImageVariant.DARK) == b"dark"


def test_effective_image_prefers_own_snapshot(store, add_sketch):
    group = uuid4()
    add_sketch(minutes=0, image=b"master", group=group)
    own = add_sketch(minutes=1, image=b"mine", group=group)

    assert effective_image(store, own) == b"mine"


def test_effective_image_oldest_holder_wins(store, add_sketch):
    group = uuid4()
    linked = add_sketch(minutes=0, group=group)
    add_sketch(minutes=10, image=b"newer", group=group)
    add_sketch(minutes=5, image=b"older", group=group)

    assert effective_image(store, linked) == b"older"


def test_effective_image_missing(store, add_sketch):
    ungrouped = add_sketch(minutes=0)
    group = uuid4()
    light_only = add_sketch(minutes=1, image=b"light", group=group)

    assert effective_image(store, ungrouped) is None
    assert effective_image(store, light_only, ImageVariant.DARK) is None


def test_link_reference_creates_pure_reference(store, add_sketch):
    group = uuid4()
    add_sketch(minutes=0, image=b"png", drawing=b"ink", group=group)

    record = link_reference(store, "Faith", group, "Romans", 10, 17)

    saved = store.get(record.id)
    assert saved.shared_drawing_id == group
    assert saved.drawing_data is None
    assert saved.image_data is None
    assert saved.image_data_dark is None
    assert saved.book_order == 45
    assert saved.text_position == TextPosition.BELOW


def test_link_reference_rejects_invalid_reference(store, add_sketch):
    group = uuid4()
    add_sketch(minutes=0, image=b"png", group=group)

    with pytest.raises(InvalidReference):
        link_reference(store, "Faith", group, "Jude", 2, 1)

    assert len(store.fetch()) == 1


def test_create_sketch_starts_new_group(store):
    first = create_sketch(store, "Hope", "Romans", 5, 5, drawing_data=b"ink", image_data=b"png")
    second = create_sketch(store, "Love", "1 Corinthians", 13, 4, drawing_data=b"ink2", image_data=b"png2")

    assert first.shared_drawing_id is not None
    assert first.shared_drawing_id != second.shared_drawing_id
    assert store.get(second.id).book_order == 46


def test_redraw_keeps_identity_and_group(store, add_sketch):
    group = uuid4()
    record = add_sketch(minutes=0, image=b"old", drawing=b"old-ink", group=group)

    redraw_sketch(store, record, drawing_data=b"new-ink", image_data=b"new", image_data_dark=b"new-dark")

    saved = store.get(record.id)
    assert saved.image_data == b"new"
    assert saved.image_data_dark == b"new-dark"
    assert saved.drawing_data == b"new-ink"
    assert saved.shared_drawing_id == group
    assert saved.creation_date == record.creation_date


def test_transfer_scenario(store, add_sketch):
    group = uuid4()
    r1 = add_sketch(minutes=0, image=b"X", drawing=b"ink", group=group, verse=1)
    r2 = add_sketch(minutes=1, group=group, verse=2)
    r3 = add_sketch(minutes=2, group=group, verse=3)

    assert resolve_master([r1, r2, r3]).id == r1.id

    plan = handle_deletion(r1, [r1, r2, r3])
    assert not plan.requires_confirmation
    assert plan.transfer_to.id == r3.id
    assert apply_deletion(store, plan) is True

    remaining = store.fetch()
    assert [r.id for r in remaining] == [r2.id, r3.id]
    heir = store.get(r3.id)
    assert heir.image_data == b"X"
    assert heir.drawing_data == b"ink"
    assert resolve_master(remaining).id == r3.id


def test_transfer_moves_dark_variant(store, add_sketch):
    group = uuid4()
    owner = add_sketch(minutes=0, image=b"light", image_dark=b"dark", group=group)
    linked = add_sketch(minutes=1, group=group)

    delete_sketch(store, owner)

    assert store.get(linked.id).image_data_dark == b"dark"


def test_delete_without_transfer_when_sibling_has_image(store, add_sketch):
    group = uuid4()
    first = add_sketch(minutes=0, image=b"one", group=group)
    second = add_sketch(minutes=1, image=b"two", group=group)
    third = add_sketch(minutes=2, group=group)

    plan = delete_sketch(store, first)

    assert plan.transfer_to is None
    assert store.get(first.id) is None
    assert store.get(third.id).image_data is None
    assert store.get(second.id).image_data == b"two"


def test_deleting_linked_reference_is_direct(store, add_sketch):
    group = uuid4()
    add_sketch(minutes=0, image=b"png", group=group)
    linked = add_sketch(minutes=1, group=group)

    plan = delete_sketch(store, linked)

    assert plan.transfer_to is None
    assert not plan.requires_confirmation
    assert store.get(linked.id) is None


def test_last_copy_requires_confirmation(store, add_sketch):
    group = uuid4()
    only = add_sketch(minutes=0, image=b"png", group=group)

    plan = delete_sketch(store, only)
    assert plan.requires_confirmation
    assert store.get(only.id) is not None

    delete_sketch(store, only, confirmed=True)
    assert store.get(only.id) is None
    assert store.fetch() == []


class FailingUpdateStore(CatalogStore):
    def update(self, record):
        raise StorageFailure("disk full")


def test_failed_transfer_does_not_delete(store, add_sketch):
    group = uuid4()
    owner = add_sketch(minutes=0, image=b"png", group=group)
    linked = add_sketch(minutes=1, group=group)
    failing = FailingUpdateStore(store.conn)

    with pytest.raises(StorageFailure):
        delete_sketch(failing, owner)

    assert store.get(owner.id).image_data == b"png"
    assert store.get(linked.id).image_data is None


def test_unmigrated_group_uses_word(store, add_sketch):
    owner = add_sketch(word="Grace", minutes=0, image=b"png")
    other = add_sketch(word="grace", minutes=1)
    add_sketch(word="Peace", minutes=2)

    members = group_members(store, other)

    assert {r.id for r in members} == {owner.id, other.id}


def test_unmigrated_record_inherits_image_by_word(store, add_sketch):
    add_sketch(word="Grace", minutes=5, image=b"newer")
    add_sketch(word="grace", minutes=0, image=b"older", image_dark=b"older-dark")
    linked = add_sketch(word="GRACE", minutes=10)
    add_sketch(word="Grace", minutes=-5, image=b"grouped", group=uuid4())
    add_sketch(word="Peace", minutes=-10, image=b"peace")

    assert effective_image(store, linked) == b"older"
    assert effective_image(store, linked, ImageVariant.DARK) == b"older-dark"
    assert len(store.fetch(IsNull("shared_drawing_id"))) == 4


def test_failed_transfer_leaves_plan_unchanged(store, add_sketch):
    group = uuid4()
    owner = add_sketch(minutes=0, image=b"png", drawing=b"ink", group=group)
    linked = add_sketch(minutes=1, group=group)
    plan = handle_deletion(owner, [owner, linked])

    with pytest.raises(StorageFailure):
        apply_deletion(FailingUpdateStore(store.conn), plan)

    assert plan.transfer_to.image_data is None
    assert plan.transfer_to.drawing_data is None
    assert store.get(linked.id).image_data is None
    assert store.get(owner.id) is not None
