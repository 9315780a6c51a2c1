"""
Content store contract, checked against both implementations
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from app.schemas.blog_post import BlogPostCreateRelaxed, BlogPostUpdate
from app.schemas.learning_resource import (
    LearningResourceCreateRelaxed,
    LearningResourceUpdate,
)
from app.services import repository
from app.services.repository import MemoryContentStore


def _post(store, **fields):
    data = {"title": "T", "content": "C", **fields}
    return store.create_blog_post(BlogPostCreateRelaxed.model_validate(data))


def _resource(store, resource_payload, **fields):
    return store.create_learning_resource(
        LearningResourceCreateRelaxed.model_validate(resource_payload(**fields))
    )


# =========================
# Blog posts
# =========================
def test_create_blog_post_applies_defaults(store):
    post = _post(store)

    assert post.category == "교육경험"
    assert post.tags is None
    assert post.summary is None
    assert post.is_published is True
    assert post.created_at == post.updated_at


def test_create_blog_post_keeps_supplied_values(store):
    post = _post(store, category="학습팁", tags=["숫자", "게임"], isPublished=False, summary="S")

    assert post.category == "학습팁"
    assert post.tags == ["숫자", "게임"]
    assert post.is_published is False
    assert post.summary == "S"


def test_blog_post_ids_are_unique(store):
    ids = {_post(store).id for _ in range(5)}
    assert len(ids) == 5


def test_list_blog_posts_newest_first(store):
    created = [_post(store, title=f"post {i}") for i in range(4)]

    posts = store.list_blog_posts()

    assert {p.id for p in posts} == {p.id for p in created}
    stamps = [p.created_at for p in posts]
    assert stamps == sorted(stamps, reverse=True)


def test_get_blog_post_missing_returns_none(store):
    assert store.get_blog_post("does-not-exist") is None


def test_update_blog_post_partial(store):
    post = _post(store, summary="old")

    updated = store.update_blog_post(post.id, BlogPostUpdate.model_validate({"title": "New"}))

    assert updated.title == "New"
    assert updated.summary == "old"
    assert updated.content == post.content
    assert updated.created_at == post.created_at
    assert updated.updated_at >= post.updated_at


def test_update_blog_post_empty_payload_only_touches_updated_at(store):
    post = _post(store, tags=["a"])

    updated = store.update_blog_post(post.id, BlogPostUpdate())

    assert updated.updated_at >= post.updated_at
    assert updated.model_dump(exclude={"updated_at"}) == post.model_dump(exclude={"updated_at"})


def test_update_blog_post_missing_returns_none(store):
    assert store.update_blog_post("nope", BlogPostUpdate(title="x")) is None


def test_delete_blog_post_is_physical(store):
    post = _post(store)

    assert store.delete_blog_post(post.id) is True
    assert store.delete_blog_post(post.id) is False
    assert store.get_blog_post(post.id) is None
    assert store.list_blog_posts() == []


# =========================
# Learning resources
# =========================
def test_create_learning_resource_defaults(store, resource_payload):
    resource = _resource(store, resource_payload)

    assert resource.download_count == 0
    assert resource.is_active is True
    assert resource.created_at == resource.updated_at
    assert resource.category == "어린이용"


def test_create_learning_resource_inactive(store, resource_payload):
    resource = _resource(store, resource_payload, isActive=False)

    assert store.get_learning_resource(resource.id) is None
    assert store.get_learning_resource(resource.id, include_inactive=True).is_active is False


def test_soft_delete_hides_but_keeps_resource(store, resource_payload):
    keep = _resource(store, resource_payload, title="keep")
    gone = _resource(store, resource_payload, title="gone")

    assert store.delete_learning_resource(gone.id) is True

    assert store.get_learning_resource(gone.id) is None
    assert [r.id for r in store.list_learning_resources()] == [keep.id]

    row = store.get_learning_resource(gone.id, include_inactive=True)
    assert row is not None
    assert row.is_active is False
    assert row.title == "gone"
    assert row.updated_at >= gone.updated_at


def test_soft_delete_twice_reports_missing(store, resource_payload):
    resource = _resource(store, resource_payload)

    assert store.delete_learning_resource(resource.id) is True
    assert store.delete_learning_resource(resource.id) is False
    assert store.delete_learning_resource("unknown") is False


def test_update_inactive_resource_returns_none(store, resource_payload):
    resource = _resource(store, resource_payload)
    store.delete_learning_resource(resource.id)

    assert store.update_learning_resource(resource.id, LearningResourceUpdate(title="x")) is None


def test_update_learning_resource_partial(store, resource_payload):
    resource = _resource(store, resource_payload)

    updated = store.update_learning_resource(
        resource.id, LearningResourceUpdate.model_validate({"difficulty": "어려움", "ageGroup": "8-10세"})
    )

    assert updated.difficulty == "어려움"
    assert updated.age_group == "8-10세"
    assert updated.title == resource.title
    assert updated.download_count == 0


def test_increment_download_count_sequential(store, resource_payload):
    resource = _resource(store, resource_payload)

    for _ in range(7):
        store.increment_download_count(resource.id)

    fetched = store.get_learning_resource(resource.id)
    assert fetched.download_count == 7
    assert fetched.updated_at >= resource.updated_at


def test_increment_download_count_concurrent(store, resource_payload):
    resource = _resource(store, resource_payload)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda _: store.increment_download_count(resource.id), range(200)))

    assert store.get_learning_resource(resource.id).download_count == 200


def test_increment_download_count_noop_for_inactive_or_unknown(store, resource_payload):
    resource = _resource(store, resource_payload)
    store.increment_download_count(resource.id)
    store.delete_learning_resource(resource.id)

    store.increment_download_count(resource.id)
    store.increment_download_count("unknown")

    assert store.get_learning_resource(resource.id, include_inactive=True).download_count == 1


def test_list_learning_resources_newest_first(store, resource_payload):
    for i in range(4):
        _resource(store, resource_payload, title=f"r{i}")

    stamps = [r.created_at for r in store.list_learning_resources()]
    assert len(stamps) == 4
    assert stamps == sorted(stamps, reverse=True)


def test_lists_break_timestamp_ties_by_id(store, resource_payload, monkeypatch):
    frozen = datetime(2024, 5, 1, 9, 30)
    monkeypatch.setattr(repository, "_now", lambda: frozen)

    posts = [_post(store, title=f"p{i}") for i in range(5)]
    resources = [_resource(store, resource_payload, title=f"r{i}") for i in range(5)]

    assert [p.id for p in store.list_blog_posts()] == sorted((p.id for p in posts), reverse=True)
    assert [r.id for r in store.list_learning_resources()] == sorted(
        (r.id for r in resources), reverse=True
    )


def test_memory_store_returns_copies():
    store = MemoryContentStore()
    post = _post(store, tags=["a"])
    post.tags.append("b")
    post.title = "changed"

    stored = store.get_blog_post(post.id)
    assert stored.tags == ["a"]
    assert stored.title == "T"
