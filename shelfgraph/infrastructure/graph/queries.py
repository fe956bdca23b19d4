"""Named Cypher queries issued by the ShelfGraph services.

Queries are separated from service logic so every traversal is defined once
and both executors (Neo4j and in-memory) answer the same names.  Every query
orders its rows by a stable key so repeated calls return rows in the same
order; scoring and final ranking happen in the services.

Parameters are always bound.  Nothing here is built by string formatting.
"""

from shelfgraph.domain.repositories import GraphQuery

# =========================================================================
# Signal generators
# =========================================================================

COLLABORATIVE_CANDIDATES = GraphQuery(
    name="collaborative_candidates",
    description=(
        "Books liked by peer readers (users sharing at least one read book), "
        "not read or wishlisted by the target user."
    ),
    outputs=("rec", "commonReaders", "avgRating"),
    cypher=(
        "MATCH (u:User {id: $userId})-[:READ]->(:Book)<-[:READ]-(peer:User)-[r:READ]->(rec:Book)\n"
        "WHERE peer <> u\n"
        "  AND r.rating >= $minRating\n"
        "  AND NOT (u)-[:READ]->(rec)\n"
        "  AND NOT (u)-[:WANTS_TO_READ]->(rec)\n"
        "WITH DISTINCT rec, peer, r\n"
        "RETURN rec, count(peer) AS commonReaders, avg(r.rating) AS avgRating\n"
        "ORDER BY rec.id"
    ),
)

GENRE_CANDIDATES = GraphQuery(
    name="genre_candidates",
    description="Unread, unwishlisted books in any of the user's preferred genres (matched by name).",
    outputs=("b", "genreMatches"),
    cypher=(
        "MATCH (u:User {id: $userId})\n"
        "UNWIND coalesce(u.preferredGenres, []) AS genreName\n"
        "MATCH (g:Genre {name: genreName})<-[:BELONGS_TO]-(b:Book)\n"
        "WHERE NOT (u)-[:READ]->(b)\n"
        "  AND NOT (u)-[:WANTS_TO_READ]->(b)\n"
        "RETURN b, count(DISTINCT g) AS genreMatches\n"
        "ORDER BY b.id"
    ),
)

SOCIAL_CANDIDATES = GraphQuery(
    name="social_candidates",
    description="Books liked by users the target follows (one hop).",
    outputs=("b", "recommenders", "avgRating"),
    cypher=(
        "MATCH (u:User {id: $userId})-[:FOLLOWS]->(followed:User)-[r:READ]->(b:Book)\n"
        "WHERE followed <> u\n"
        "  AND r.rating >= $minRating\n"
        "  AND NOT (u)-[:READ]->(b)\n"
        "  AND NOT (u)-[:WANTS_TO_READ]->(b)\n"
        "WITH b, followed, r\n"
        "ORDER BY followed.username\n"
        "RETURN b, collect(DISTINCT followed.username) AS recommenders, avg(r.rating) AS avgRating\n"
        "ORDER BY b.id"
    ),
)

AUTHOR_CANDIDATES = GraphQuery(
    name="author_candidates",
    description="Unread books by authors of books the user rated highly.",
    outputs=("other", "authorId", "authorName", "userRating"),
    cypher=(
        "MATCH (u:User {id: $userId})-[r:READ]->(:Book)<-[:WROTE]-(a:Author)-[:WROTE]->(other:Book)\n"
        "WHERE r.rating >= $minRating\n"
        "  AND NOT (u)-[:READ]->(other)\n"
        "RETURN other, a.id AS authorId, a.name AS authorName, max(r.rating) AS userRating\n"
        "ORDER BY other.id, authorId"
    ),
)

TRENDING_CANDIDATES = GraphQuery(
    name="trending_candidates",
    description="Books with at least $minReaders read events, with reader count and mean rating.",
    outputs=("b", "readers", "avgRating"),
    cypher=(
        "MATCH (:User)-[r:READ]->(b:Book)\n"
        "WITH b, count(r) AS readers, avg(r.rating) AS avgRating\n"
        "WHERE readers >= $minReaders\n"
        "RETURN b, readers, avgRating\n"
        "ORDER BY b.id"
    ),
)

SIMILAR_BOOKS = GraphQuery(
    name="similar_books",
    description="Books reachable through one outgoing SIMILAR_TO edge.",
    outputs=("similar", "score"),
    cypher=(
        "MATCH (b:Book {id: $bookId})-[s:SIMILAR_TO]->(similar:Book)\n"
        "WHERE similar <> b\n"
        "RETURN similar, s.score AS score\n"
        "ORDER BY score DESC, similar.id"
    ),
)

# =========================================================================
# Catalog browsing
# =========================================================================

SEARCH_BOOKS = GraphQuery(
    name="search_books",
    outputs=("b",),
    cypher=(
        "MATCH (b:Book)\n"
        "WHERE toLower(b.title) CONTAINS toLower($query)\n"
        "   OR toLower(coalesce(b.description, '')) CONTAINS toLower($query)\n"
        "RETURN b\n"
        "ORDER BY b.rating DESC, b.id\n"
        "LIMIT $limit"
    ),
)

BOOKS_BY_GENRE = GraphQuery(
    name="books_by_genre",
    outputs=("b",),
    cypher=(
        "MATCH (b:Book)-[:BELONGS_TO]->(:Genre {id: $genreId})\n"
        "RETURN b\n"
        "ORDER BY b.rating DESC, b.id"
    ),
)

BOOKS_BY_AUTHOR = GraphQuery(
    name="books_by_author",
    outputs=("b",),
    cypher=(
        "MATCH (:Author {id: $authorId})-[:WROTE]->(b:Book)\n"
        "RETURN b\n"
        "ORDER BY b.publishedYear DESC, b.id"
    ),
)

TOP_RATED_BOOKS = GraphQuery(
    name="top_rated_books",
    outputs=("b",),
    cypher="MATCH (b:Book)\nRETURN b\nORDER BY b.rating DESC, b.id\nLIMIT $limit",
)

BOOK_DETAILS = GraphQuery(
    name="book_details",
    description="A book with its authors and genres; empty matches collect as {id: null}.",
    outputs=("b", "authors", "genres"),
    cypher=(
        "MATCH (b:Book {id: $bookId})\n"
        "OPTIONAL MATCH (a:Author)-[:WROTE]->(b)\n"
        "OPTIONAL MATCH (b)-[:BELONGS_TO]->(g:Genre)\n"
        "RETURN b,\n"
        "       collect(DISTINCT {id: a.id, name: a.name}) AS authors,\n"
        "       collect(DISTINCT {id: g.id, name: g.name}) AS genres"
    ),
)

USER_ACTIVITY = GraphQuery(
    name="user_activity",
    outputs=("u", "booksRead", "followers", "following"),
    cypher=(
        "MATCH (u:User {id: $userId})\n"
        "OPTIONAL MATCH (u)-[:READ]->(b:Book)\n"
        "OPTIONAL MATCH (follower:User)-[:FOLLOWS]->(u)\n"
        "OPTIONAL MATCH (u)-[:FOLLOWS]->(followed:User)\n"
        "RETURN u,\n"
        "       count(DISTINCT b) AS booksRead,\n"
        "       count(DISTINCT follower) AS followers,\n"
        "       count(DISTINCT followed) AS following"
    ),
)

READING_HISTORY = GraphQuery(
    name="reading_history",
    outputs=("b", "rating", "readDate", "review"),
    cypher=(
        "MATCH (:User {id: $userId})-[r:READ]->(b:Book)\n"
        "RETURN b, r.rating AS rating, r.readDate AS readDate, r.review AS review\n"
        "ORDER BY readDate DESC, b.id"
    ),
)

POPULAR_GENRES = GraphQuery(
    name="popular_genres",
    outputs=("g", "readers"),
    cypher=(
        "MATCH (g:Genre)<-[:BELONGS_TO]-(:Book)<-[:READ]-(u:User)\n"
        "RETURN g, count(DISTINCT u) AS readers\n"
        "ORDER BY readers DESC, g.id\n"
        "LIMIT $limit"
    ),
)
