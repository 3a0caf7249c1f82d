import csv

import pandas as pd

from crawler.errors import FetchError, FieldMissing, UnknownSource
from crawler.models import Author, Book, Isbn, Price, SourceId, Title
from scheduler.reporter import (
    AUTHOR_SEPARATOR,
    CSV_HEADERS,
    book_to_row,
    print_summary,
    write_books_csv,
)
from scheduler.scheduler import Failure, RunResult


def make_book(authors=("A. One", "B. Two"), site=SourceId.LABIRINT):
    return Book(
        site=site,
        source="https://www.labirint.ru/books/801841/",
        authors=tuple(Author.normalize(a) for a in authors),
        isbn=Isbn.validate("978-5-17-123456-7"),
        title=Title.normalize("Война и мир"),
        price=Price.parse("1 250 ₽"),
    )


def test_book_to_row_joins_authors():
    row = book_to_row(make_book())
    assert row == {
        "site": "labirint",
        "source": "https://www.labirint.ru/books/801841/",
        "isbn": "978-5-17-123456-7",
        "title": "Война и мир",
        "authors": "A. One; B. Two",
    }


def test_authors_round_trip_through_csv(tmp_path):
    """
    Authors written as "A. One; B. Two" split back into the original list.

    Args:
        tmp_path: pytest temporary directory

    Asserts:
        - Header row is exactly site, source, isbn, title, authors
        - Re-splitting the authors cell on "; " restores the list
    """
    path = write_books_csv([make_book()], tmp_path / "books.csv")

    with open(path, newline="", encoding="utf-8") as fh:
        reader = csv.reader(fh)
        header = next(reader)
        row = dict(zip(header, next(reader)))

    assert header == CSV_HEADERS
    assert row["authors"] == "A. One; B. Two"
    assert row["authors"].split(AUTHOR_SEPARATOR) == ["A. One", "B. Two"]
    assert row["isbn"] == "978-5-17-123456-7"


def test_one_row_per_book_and_nested_dir_created(tmp_path):
    books = [make_book(), make_book(authors=("Solo",), site=SourceId.EKSMO)]
    path = write_books_csv(books, tmp_path / "out" / "nested" / "books.csv")

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    assert list(df.columns) == CSV_HEADERS
    assert len(df) == 2
    assert sorted(df["site"]) == ["eksmo", "labirint"]


def test_empty_export_writes_header_only(tmp_path):
    path = write_books_csv([], tmp_path / "books.csv")
    with open(path, encoding="utf-8") as fh:
        lines = fh.read().splitlines()
    assert lines == [",".join(CSV_HEADERS)]


def test_print_summary(capsys):
    result = RunResult(
        books=[make_book()],
        failures=[
            Failure("https://x.example/", UnknownSource("https://x.example/")),
            Failure("https://eksmo.ru/book/1/", FetchError("https://eksmo.ru/book/1/", "HTTP 500")),
            Failure("https://eksmo.ru/book/2/", FieldMissing("isbn", "https://eksmo.ru/book/2/")),
        ],
        dispatched=3,
    )

    print_summary(result)

    out = capsys.readouterr().out
    assert "Succeeded: 1" in out
    assert "Failed: 3" in out
    assert "dispatch: 1" in out
    assert "fetch: 1" in out
    assert "field:isbn: 1" in out
