# scheduler/reporter.py
import logging
import os
from collections import Counter
from typing import Iterable

import pandas as pd

from crawler.models import Book

logger = logging.getLogger("reporter")

CSV_HEADERS = ["site", "source", "isbn", "title", "authors"]
AUTHOR_SEPARATOR = "; "


def book_to_row(book: Book) -> dict:
    return {
        "site": book.site.value,
        "source": book.source,
        "isbn": book.isbn.as_str(),
        "title": book.title.as_str(),
        "authors": AUTHOR_SEPARATOR.join(a.as_str() for a in book.authors),
    }


def write_books_csv(books: Iterable[Book], path) -> str:
    """
    Write successful records to a CSV file.

    Args:
        books (Iterable[Book]): Records to export, any order
        path (str | os.PathLike): Output file; parent directories are created

    Returns:
        str: The path written

    Output Format:
        Header row site,source,isbn,title,authors; one row per Book;
        authors joined with "; ". An empty run still writes the header.

    Raises:
        OSError: If the file cannot be written
    """
    path = os.fspath(path)
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    rows = [book_to_row(b) for b in books]
    pd.DataFrame(rows, columns=CSV_HEADERS).to_csv(path, index=False, encoding="utf-8")

    logger.info(f"Exported {len(rows)} books to {path}")
    return path


def print_summary(result) -> None:
    """Print the final success/error counts with a per-stage breakdown."""
    print("\nSummary:")
    print(f"  Succeeded: {result.success_count}")
    print(f"  Failed: {result.failure_count}")
    stages = Counter(f.stage for f in result.failures)
    for stage, count in sorted(stages.items()):
        print(f"    {stage}: {count}")
