import pytest

mongomock = pytest.importorskip("mongomock")

from rulefilter.core.compiler import MatchAll, MatchNone, MongoFilterCompiler  # noqa: E402
from rulefilter.core.conditions import parse_condition  # noqa: E402
from rulefilter.storage.mongo import MongoQueryable  # noqa: E402


@pytest.fixture
def articles():
    coll = mongomock.MongoClient().db.articles
    coll.insert_many(
        [
            {"title": "a", "owner_id": 7, "status": "draft"},
            {"title": "b", "owner_id": 42, "status": "published"},
            {"title": "c", "owner_id": 42, "status": "draft"},
        ]
    )
    return coll


def test_owner_scenario_returns_exactly_matching_records(articles):
    compiler = MongoFilterCompiler()
    q = MongoQueryable(articles)
    rows = q.find(compiler.native(compiler.compile(parse_condition({"owner_id": 42}))))
    assert sorted(r["title"] for r in rows) == ["b", "c"]


def test_match_none_returns_nothing_and_match_all_everything(articles):
    compiler = MongoFilterCompiler()
    q = MongoQueryable(articles)
    assert q.find(compiler.native(MatchNone)) == []
    assert len(q.find(compiler.native(MatchAll))) == 3


def test_projection_is_forwarded(articles):
    q = MongoQueryable(articles, projection={"title": 1, "_id": 0})
    assert sorted(q.find({"status": "draft"}), key=lambda r: r["title"]) == [
        {"title": "a"},
        {"title": "c"},
    ]


def test_contains_checks_by_id(articles):
    q = MongoQueryable(articles)
    doc = articles.find_one({"title": "b"})
    assert q.contains({"owner_id": 42}, doc) is True
    assert q.contains({"owner_id": 7}, doc) is False
    assert q.contains({}, doc) is True
    assert q.contains({"owner_id": 42}, {"title": "unsaved"}) is False


def test_find_rejects_non_mapping_filters(articles):
    with pytest.raises(TypeError):
        MongoQueryable(articles).find(lambda d: True)


def test_collection_surface_is_checked():
    with pytest.raises(TypeError):
        MongoQueryable(object())
