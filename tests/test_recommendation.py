"""Tests for the signal generators and the hybrid aggregator."""

import asyncio

import pytest

from conftest import add_author, add_books, add_genre, add_users
from shelfgraph.domain.exceptions import ExecutorUnavailableError, MalformedInputError
from shelfgraph.infrastructure.graph.memory import InMemoryGraph, InMemoryQueryExecutor
from shelfgraph.infrastructure.graph.queries import GENRE_CANDIDATES
from shelfgraph.services.recommendation import HYBRID_REASON, SIMILAR_REASON, RecommendationService


def ids(results):
    return [r.book.id for r in results]


# ── Collaborative ─────────────────────────────────


async def test_collaborative_recommends_peer_favourite(graph: InMemoryGraph, service):
    add_users(graph, "alice", "bob")
    add_books(graph, x=4.0, y=3.5)
    graph.add_read("alice", "x", 4)
    graph.add_read("bob", "x", 5)
    graph.add_read("bob", "y", 5)

    results = await service.recommend_for_user("alice")

    assert ids(results) == ["y"]
    assert results[0].score == pytest.approx(1 * 0.4 + 5 * 0.6)
    assert results[0].reason == "Recommended by 1 users with similar taste"


async def test_collaborative_counts_distinct_peers_and_averages(graph: InMemoryGraph, service):
    add_users(graph, "alice", "bob", "carol")
    add_books(graph, x=4.0, x2=4.0, y=4.0, z=4.0)
    graph.add_read("alice", "x", 5)
    graph.add_read("alice", "x2", 5)
    # bob shares two books with alice but must count once
    graph.add_read("bob", "x", 5)
    graph.add_read("bob", "x2", 5)
    graph.add_read("bob", "y", 4)
    graph.add_read("carol", "x", 3)
    graph.add_read("carol", "y", 5)
    graph.add_read("carol", "z", 5)

    results = await service.recommend_for_user("alice")

    assert ids(results) == ["y", "z"]
    assert results[0].score == pytest.approx(2 * 0.4 + 4.5 * 0.6)
    assert results[0].reason == "Recommended by 2 users with similar taste"
    assert results[1].score == pytest.approx(0.4 + 3.0)


async def test_collaborative_excludes_read_wishlisted_and_low_rated(graph: InMemoryGraph, service):
    add_users(graph, "alice", "bob")
    add_books(graph, x=4.0, read=4.0, wished=4.0, meh=4.0, good=4.0)
    graph.add_read("alice", "x", 5)
    graph.add_read("alice", "read", 2)
    graph.add_wish("alice", "wished")
    for book_id in ("x", "read", "wished", "good"):
        graph.add_read("bob", book_id, 5)
    graph.add_read("bob", "meh", 3)

    assert ids(await service.recommend_for_user("alice")) == ["good"]


async def test_collaborative_without_history_is_empty(graph: InMemoryGraph, service):
    add_users(graph, "alice", "bob")
    add_books(graph, x=4.0)
    graph.add_read("bob", "x", 5)

    assert await service.recommend_for_user("alice") == []
    assert await service.recommend_for_user("nobody") == []


# ── Genre affinity ────────────────────────────────


async def test_genre_ranks_by_rating_within_equal_matches(graph: InMemoryGraph, service):
    add_users(graph, "alice", genres=["Science Fiction"])
    add_books(graph, sf1=4.0, sf2=4.5, other=5.0)
    add_genre(graph, "g-sf", "Science Fiction", "sf1", "sf2")
    add_genre(graph, "g-rom", "Romance", "other")

    results = await service.recommend_by_preferred_genres("alice")

    assert ids(results) == ["sf2", "sf1"]
    assert [r.score for r in results] == pytest.approx([6.5, 6.0])
    assert results[0].reason == "Matches 1 of your preferred genres"


async def test_genre_overlap_outweighs_rating(graph: InMemoryGraph, service):
    add_users(graph, "alice", genres=["Fantasy", "Horror"])
    add_books(graph, both=3.0, single=4.9)
    add_genre(graph, "g-fan", "Fantasy", "both", "single")
    add_genre(graph, "g-hor", "Horror", "both")

    results = await service.recommend_by_preferred_genres("alice")

    assert ids(results) == ["both", "single"]
    assert results[0].reason == "Matches 2 of your preferred genres"


async def test_genre_excludes_read_and_wishlisted(graph: InMemoryGraph, service):
    add_users(graph, "alice", genres=["Mystery"])
    add_books(graph, read=4.0, wished=4.0, fresh=4.0)
    add_genre(graph, "g-mys", "Mystery", "read", "wished", "fresh")
    graph.add_read("alice", "read", 5)
    graph.add_wish("alice", "wished")

    assert ids(await service.recommend_by_preferred_genres("alice")) == ["fresh"]


async def test_genre_without_preferences_is_empty(graph: InMemoryGraph, service):
    add_users(graph, "alice")
    add_books(graph, x=4.0)
    add_genre(graph, "g-sf", "Science Fiction", "x")

    assert await service.recommend_by_preferred_genres("alice") == []


# ── Social ────────────────────────────────────────


async def test_social_orders_by_average_then_breadth(graph: InMemoryGraph, service):
    add_users(graph, "alice", "bob", "carol", "dave")
    add_books(graph, p=4.0, q=4.0, r=4.0)
    graph.add_follow("alice", "carol")
    graph.add_follow("alice", "bob")
    graph.add_read("bob", "p", 5)
    graph.add_read("carol", "p", 4)
    graph.add_read("bob", "q", 5)
    graph.add_read("carol", "r", 5)
    graph.add_read("dave", "r", 4)

    results = await service.recommend_from_following("alice")

    assert ids(results) == ["q", "r", "p"]
    assert results[0].score == pytest.approx(5.0)
    assert results[2].score == pytest.approx(4.5)
    assert results[2].reason == "Liked by bob, carol"


async def test_social_breadth_breaks_ties(graph: InMemoryGraph, service):
    add_users(graph, "alice", "bob", "carol")
    add_books(graph, a=4.0, b=4.0)
    graph.add_follow("alice", "bob")
    graph.add_follow("alice", "carol")
    graph.add_read("bob", "a", 5)
    graph.add_read("bob", "b", 5)
    graph.add_read("carol", "b", 5)

    assert ids(await service.recommend_from_following("alice")) == ["b", "a"]


async def test_social_is_one_hop_and_skips_read_books(graph: InMemoryGraph, service):
    add_users(graph, "alice", "bob", "carol")
    add_books(graph, mine=4.0, far=4.0, near=4.0, weak=4.0)
    graph.add_follow("alice", "bob")
    graph.add_follow("bob", "carol")
    graph.add_read("alice", "mine", 4)
    graph.add_read("bob", "mine", 5)
    graph.add_read("bob", "near", 4)
    graph.add_read("bob", "weak", 3)
    graph.add_read("carol", "far", 5)

    assert ids(await service.recommend_from_following("alice")) == ["near"]


async def test_social_skips_wishlisted_books(graph: InMemoryGraph, service):
    add_users(graph, "alice", "bob")
    add_books(graph, wanted=4.0, other=4.0)
    graph.add_follow("alice", "bob")
    graph.add_read("bob", "wanted", 5)
    graph.add_read("bob", "other", 4)
    graph.add_wish("alice", "wanted")

    assert ids(await service.recommend_from_following("alice")) == ["other"]


async def test_social_without_follows_is_empty(graph: InMemoryGraph, service):
    add_users(graph, "alice", "bob")
    add_books(graph, x=4.0)
    graph.add_follow("bob", "alice")
    graph.add_read("bob", "x", 5)

    assert await service.recommend_from_following("alice") == []


# ── Author affinity ───────────────────────────────


async def test_author_scores_with_best_rating_for_author(graph: InMemoryGraph, service):
    add_users(graph, "alice")
    add_books(graph, a1=4.0, a2=4.0, a3=4.0, b1=4.0, b2=4.0)
    add_author(graph, "auth-a", "Ann Author", "a1", "a2", "a3")
    add_author(graph, "auth-b", "Ben Writer", "b1", "b2")
    graph.add_read("alice", "a1", 4)
    graph.add_read("alice", "a2", 5)
    graph.add_read("alice", "b1", 4)

    results = await service.recommend_by_favorite_authors("alice")

    assert ids(results) == ["a3", "b2"]
    assert [r.score for r in results] == pytest.approx([5.0, 4.0])
    assert results[0].reason == "More from Ann Author, an author you enjoyed"


async def test_author_ignores_disliked_books(graph: InMemoryGraph, service):
    add_users(graph, "alice")
    add_books(graph, a1=4.0, a2=4.0)
    add_author(graph, "auth-a", "Ann Author", "a1", "a2")
    graph.add_read("alice", "a1", 3)

    assert await service.recommend_by_favorite_authors("alice") == []


async def test_author_keeps_co_authored_book_per_author(graph: InMemoryGraph, service):
    add_users(graph, "alice")
    add_books(graph, a1=4.0, b1=4.0, joint=4.0)
    add_author(graph, "auth-a", "Ann Author", "a1", "joint")
    add_author(graph, "auth-b", "Ben Writer", "b1", "joint")
    graph.add_read("alice", "a1", 5)
    graph.add_read("alice", "b1", 4)

    results = await service.recommend_by_favorite_authors("alice")

    assert ids(results) == ["joint", "joint"]
    assert {r.reason for r in results} == {
        "More from Ann Author, an author you enjoyed",
        "More from Ben Writer, an author you enjoyed",
    }


# ── Trending ──────────────────────────────────────


async def test_trending_scores_readers_and_rating(graph: InMemoryGraph, service):
    add_users(graph, "u1", "u2", "u3")
    add_books(graph, hit=4.0, ok=4.0, lonely=5.0)
    for user in ("u1", "u2", "u3"):
        graph.add_read(user, "hit", 5)
    graph.add_read("u1", "ok", 3)
    graph.add_read("u2", "ok", 3)
    graph.add_read("u3", "lonely", 5)

    results = await service.trending_books()

    assert ids(results) == ["hit", "ok"]
    assert results[0].score == pytest.approx(3 * 0.3 + 5 * 0.7)
    assert results[1].score == pytest.approx(2 * 0.3 + 3 * 0.7)
    assert results[0].reason == "Popular: 3 readers, 5.0 avg rating"


# ── Book similarity ───────────────────────────────


async def test_similar_books_ordered_by_edge_score(graph: InMemoryGraph, service):
    add_books(graph, seed=4.0, close=4.0, closer=4.0, far=4.0)
    graph.add_similarity("seed", "close", 0.7)
    graph.add_similarity("seed", "closer", 0.9)
    graph.add_similarity("seed", "far", 0.2, symmetric=False)

    results = await service.recommend_from_book("seed", limit=2)

    assert ids(results) == ["closer", "close"]
    assert results[0].score == pytest.approx(0.9)
    assert results[0].reason == SIMILAR_REASON


async def test_similarity_does_not_assume_symmetry(graph: InMemoryGraph, service):
    add_books(graph, a=4.0, b=4.0)
    graph.add_similarity("a", "b", 0.8, symmetric=False)

    assert ids(await service.recommend_from_book("a")) == ["b"]
    assert await service.recommend_from_book("b") == []


async def test_book_without_similarity_edges_is_empty(graph: InMemoryGraph, service):
    add_books(graph, lonely=4.0)
    assert await service.recommend_from_book("lonely") == []
    assert await service.recommend_from_book("missing") == []


# ── Hybrid ────────────────────────────────────────


@pytest.fixture
def reading_circle(graph: InMemoryGraph) -> InMemoryGraph:
    add_users(graph, "alice", genres=["Fantasy"])
    add_users(graph, "bob", "nobody")
    add_books(graph, shared=4.0, peer_pick=3.8, fantasy=4.6, sequel=4.2, unrelated=5.0)
    add_genre(graph, "g-fan", "Fantasy", "fantasy", "peer_pick")
    add_author(graph, "auth-a", "Ann Author", "shared", "sequel")
    graph.add_read("alice", "shared", 5)
    graph.add_read("bob", "shared", 5)
    graph.add_read("bob", "peer_pick", 5)
    graph.add_read("bob", "sequel", 4)
    graph.add_read("bob", "unrelated", 5)
    return graph


async def test_hybrid_merges_dedups_and_ranks_by_book_rating(reading_circle, service):
    results = await service.hybrid_recommendations("alice")

    assert ids(results) == ["unrelated", "fantasy", "sequel", "peer_pick"]
    assert len(set(ids(results))) == len(results)
    assert [r.score for r in results] == pytest.approx([5.0, 4.6, 4.2, 3.8])
    assert all(r.reason == HYBRID_REASON for r in results)


async def test_hybrid_truncates_to_limit(reading_circle, service):
    assert ids(await service.hybrid_recommendations("alice", limit=2)) == ["unrelated", "fantasy"]


async def test_hybrid_degrades_to_genre_only_without_history(graph: InMemoryGraph, service):
    add_users(graph, "alice", genres=["Fantasy"])
    add_books(graph, f1=4.1, f2=4.3)
    add_genre(graph, "g-fan", "Fantasy", "f1", "f2")

    assert ids(await service.hybrid_recommendations("alice")) == ["f2", "f1"]


async def test_hybrid_does_not_fall_back_to_trending(reading_circle, service):
    assert await service.trending_books() != []
    assert await service.hybrid_recommendations("nobody") == []
    assert await service.hybrid_recommendations("ghost") == []


class FlakyGenreExecutor(InMemoryQueryExecutor):
    """Fails the genre query; every other query stays busy for a moment."""

    def __init__(self, graph: InMemoryGraph):
        super().__init__(graph)
        self.in_flight = 0

    async def execute(self, query, params):
        if query.name == GENRE_CANDIDATES.name:
            raise ExecutorUnavailableError("genre pool exhausted")
        self.in_flight += 1
        try:
            await asyncio.sleep(0.05)
            return await super().execute(query, params)
        finally:
            self.in_flight -= 1


async def test_hybrid_failure_waits_for_sibling_queries(reading_circle):
    executor = FlakyGenreExecutor(reading_circle)
    service = RecommendationService(executor)

    with pytest.raises(ExecutorUnavailableError):
        await service.hybrid_recommendations("alice")
    assert executor.in_flight == 0


# ── Cross-cutting properties ──────────────────────


async def test_limit_larger_than_pool_returns_everything(reading_circle, service):
    assert len(await service.hybrid_recommendations("alice", limit=50)) == 4
    assert len(await service.recommend_for_user("alice", limit=50)) == 3


async def test_results_never_exceed_limit(reading_circle, service):
    for limit in (1, 2, 3):
        assert len(await service.recommend_for_user("alice", limit=limit)) <= limit
        assert len(await service.hybrid_recommendations("alice", limit=limit)) <= limit
        assert len(await service.trending_books(limit=limit)) <= limit


async def test_repeated_calls_are_identical(reading_circle, service):
    first = await service.hybrid_recommendations("alice")
    second = await service.hybrid_recommendations("alice")
    assert first == second
    assert await service.recommend_for_user("alice") == await service.recommend_for_user("alice")


@pytest.mark.parametrize("limit", [0, -1, True, 2.5])
async def test_bad_limit_rejected_before_querying(executor, service, limit):
    with pytest.raises(MalformedInputError):
        await service.recommend_for_user("alice", limit=limit)
    with pytest.raises(MalformedInputError):
        await service.trending_books(limit=limit)
    assert executor.queries_run == 0


@pytest.mark.parametrize("user_id", ["", "   "])
async def test_blank_identifier_rejected_before_querying(executor, service, user_id):
    with pytest.raises(MalformedInputError):
        await service.hybrid_recommendations(user_id)
    with pytest.raises(MalformedInputError):
        await service.recommend_from_book(user_id)
    assert executor.queries_run == 0


async def test_custom_rating_threshold(graph: InMemoryGraph, executor):
    add_users(graph, "alice", "bob")
    add_books(graph, x=4.0, y=4.0)
    graph.add_read("alice", "x", 5)
    graph.add_read("bob", "x", 5)
    graph.add_read("bob", "y", 3)

    lenient = RecommendationService(executor, min_liked_rating=3)
    assert ids(await lenient.recommend_for_user("alice")) == ["y"]
