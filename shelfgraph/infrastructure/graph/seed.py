"""Demo dataset for the in-memory backend."""

import logging

from shelfgraph.domain.entities import Author, Book, Genre, User
from shelfgraph.infrastructure.graph.memory import InMemoryGraph

logger = logging.getLogger(__name__)

AUTHORS = [
    Author("author-1", "George Orwell", 1903, "British"),
    Author("author-2", "J.K. Rowling", 1965, "British"),
    Author("author-3", "Stephen King", 1947, "American"),
    Author("author-4", "Agatha Christie", 1890, "British"),
    Author("author-5", "Isaac Asimov", 1920, "American"),
    Author("author-7", "Frank Herbert", 1920, "American"),
]

GENRES = [
    Genre("genre-1", "Science Fiction", "Imaginative concepts such as futuristic science and technology"),
    Genre("genre-2", "Fantasy", "Magical elements and supernatural phenomena"),
    Genre("genre-3", "Mystery", "The solution of a crime or puzzle"),
    Genre("genre-4", "Horror", "Fiction intended to frighten"),
    Genre("genre-6", "Dystopian", "An imagined society of great suffering or injustice"),
    Genre("genre-10", "Classic", "Timeless works of literature"),
]

BOOKS = [
    Book("book-1", "1984", 1949, 328, "978-0451524935", 4.5, "A dystopian novel about totalitarianism and surveillance"),
    Book("book-2", "Animal Farm", 1945, 112, "978-0451526342", 4.3, "An allegorical novella reflecting the Russian Revolution"),
    Book("book-3", "Harry Potter and the Philosopher's Stone", 1997, 309, "978-0747532699", 4.7, "A young wizard discovers his magical heritage"),
    Book("book-4", "Harry Potter and the Chamber of Secrets", 1998, 341, "978-0747538493", 4.6, "Harry returns to Hogwarts for a second year"),
    Book("book-5", "The Shining", 1977, 447, "978-0307743657", 4.4, "A family becomes isolated in a haunted hotel during winter"),
    Book("book-7", "Murder on the Orient Express", 1934, 256, "978-0062693662", 4.5, "Detective Poirot investigates a murder on a train"),
    Book("book-8", "And Then There Were None", 1939, 272, "978-0062073471", 4.6, "Ten strangers are lured to an island"),
    Book("book-9", "Foundation", 1951, 244, "978-0553293357", 4.4, "The fall of a galactic empire"),
    Book("book-10", "I, Robot", 1950, 224, "978-0553382563", 4.2, "Short stories about robots and artificial intelligence"),
    Book("book-13", "Dune", 1965, 688, "978-0441172719", 4.5, "Politics, religion, and ecology on a desert planet"),
    Book("book-19", "The Stand", 1978, 1153, "978-0307743688", 4.5, "Survivors of a deadly plague face a final battle"),
    Book("book-20", "Harry Potter and the Prisoner of Azkaban", 1999, 435, "978-0747542155", 4.8, "A dangerous prisoner escapes"),
]

USERS = [
    User("user-1", "bookworm42", "bookworm42@email.com", "2024-01-15", ("Science Fiction", "Fantasy")),
    User("user-2", "mysterylover", "mystery@email.com", "2024-02-20", ("Mystery", "Thriller")),
    User("user-4", "horrornight", "horror@email.com", "2024-04-05", ("Horror", "Thriller")),
    User("user-5", "scifigeek", "scifi@email.com", "2024-05-12", ("Science Fiction", "Dystopian")),
]

WROTE = [
    ("author-1", "book-1"), ("author-1", "book-2"),
    ("author-2", "book-3"), ("author-2", "book-4"), ("author-2", "book-20"),
    ("author-3", "book-5"), ("author-3", "book-19"),
    ("author-4", "book-7"), ("author-4", "book-8"),
    ("author-5", "book-9"), ("author-5", "book-10"),
    ("author-7", "book-13"),
]

BELONGS_TO = [
    ("book-1", "genre-6"), ("book-1", "genre-10"), ("book-2", "genre-10"),
    ("book-3", "genre-2"), ("book-4", "genre-2"), ("book-20", "genre-2"),
    ("book-5", "genre-4"), ("book-19", "genre-4"), ("book-19", "genre-6"),
    ("book-7", "genre-3"), ("book-8", "genre-3"),
    ("book-9", "genre-1"), ("book-10", "genre-1"), ("book-13", "genre-1"),
]

READS = [
    ("user-1", "book-3", 5, "2024-02-01"), ("user-1", "book-9", 5, "2024-03-15"),
    ("user-1", "book-13", 4, "2024-04-20"),
    ("user-2", "book-7", 5, "2024-03-01"), ("user-2", "book-8", 5, "2024-03-20"),
    ("user-2", "book-1", 4, "2024-05-10"),
    ("user-4", "book-5", 5, "2024-04-10"), ("user-4", "book-19", 4, "2024-05-01"),
    ("user-4", "book-3", 3, "2024-06-01"),
    ("user-5", "book-9", 5, "2024-05-20"), ("user-5", "book-10", 4, "2024-06-02"),
    ("user-5", "book-1", 5, "2024-06-15"), ("user-5", "book-13", 5, "2024-07-01"),
]

WISHLIST = [("user-1", "book-20"), ("user-5", "book-2")]

FOLLOWS = [("user-1", "user-5"), ("user-5", "user-1"), ("user-2", "user-4"), ("user-4", "user-1")]

SIMILAR = [
    ("book-1", "book-2", 0.9), ("book-3", "book-4", 0.95), ("book-3", "book-20", 0.95),
    ("book-9", "book-13", 0.8), ("book-9", "book-10", 0.75), ("book-5", "book-19", 0.8),
    ("book-7", "book-8", 0.9),
]


def load_demo_graph() -> InMemoryGraph:
    """Build a small, fully connected library graph."""
    graph = InMemoryGraph()
    for author in AUTHORS:
        graph.add_author(author)
    for genre in GENRES:
        graph.add_genre(genre)
    for book in BOOKS:
        graph.add_book(book)
    for user in USERS:
        graph.add_user(user)
    for author_id, book_id in WROTE:
        graph.add_wrote(author_id, book_id)
    for book_id, genre_id in BELONGS_TO:
        graph.add_to_genre(book_id, genre_id)
    for user_id, book_id, rating, read_date in READS:
        graph.add_read(user_id, book_id, rating, read_date)
    for user_id, book_id in WISHLIST:
        graph.add_wish(user_id, book_id)
    for follower_id, followed_id in FOLLOWS:
        graph.add_follow(follower_id, followed_id)
    for book_id, other_id, score in SIMILAR:
        graph.add_similarity(book_id, other_id, score)

    logger.info(
        "Loaded demo graph: %d books, %d users, %d reads",
        len(graph.books), len(graph.users), len(graph.reads),
    )
    return graph
