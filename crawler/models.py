# crawler/models.py
import re
import unicodedata
from enum import Enum
from typing import Optional, Tuple

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict

from .errors import InvalidIsbn, InvalidPrice, NoIsbnCandidate

# One fetched page, parsed. Lives only inside a single parse_record call.
PageContext = BeautifulSoup

ISBN_SEPARATORS = re.compile(r"[- ]")
ISBN_TOKEN_SPLIT = re.compile(r"[,;]")
ASCII_DIGITS = re.compile(r"[0-9]+")
PRICE_SEPARATORS = {",", " ", "\u00a0", "\u202f", "\u2009"}


class SourceId(str, Enum):
    LABIRINT = "labirint"
    IGRASLOV = "igra_slov"
    EKSMO = "eksmo"

    def __str__(self):
        return self.value


class Isbn(str):
    """
    A validated ISBN-10 or ISBN-13 that keeps its original formatting.

    The stored text is exactly what the page showed (dashes, spaces and
    all); validation only looks at the separator-free form.
    """

    @classmethod
    def validate(cls, raw: str) -> "Isbn":
        """
        Validate a single ISBN candidate.

        Args:
            raw (str): Candidate text, possibly containing "-" or spaces

        Returns:
            Isbn: The candidate, unmodified, as an Isbn

        Raises:
            InvalidIsbn: If the stripped text is not 10 or 13 ASCII digits
        """
        stripped = ISBN_SEPARATORS.sub("", raw.strip())
        if not ASCII_DIGITS.fullmatch(stripped):
            raise InvalidIsbn(raw, "ISBN contains non-digit characters")
        if len(stripped) not in (10, 13):
            raise InvalidIsbn(
                raw, f"expected 10 or 13 digits, found {len(stripped)}"
            )
        return cls(raw)

    @classmethod
    def extract(cls, raw_text: str) -> "Isbn":
        """
        Pick and validate one ISBN out of a field that may list several.

        Args:
            raw_text (str): Text like "5-17-000000-0, 978-5-17-000000-1"

        Returns:
            Isbn: The first 13-digit candidate, else the last candidate

        Raises:
            NoIsbnCandidate: If splitting on "," and ";" leaves no tokens
            InvalidIsbn: If the chosen candidate fails validation
        """
        tokens = [t.strip() for t in ISBN_TOKEN_SPLIT.split(raw_text)]
        tokens = [t for t in tokens if t]
        if not tokens:
            raise NoIsbnCandidate(raw_text, "no ISBN detected")
        for token in tokens:
            if _digit_count(token) == 13:
                return cls.validate(token)
        return cls.validate(tokens[-1])

    @property
    def digits(self) -> str:
        return ISBN_SEPARATORS.sub("", self.strip())

    def as_str(self) -> str:
        return str(self)


def _digit_count(text: str) -> int:
    return sum(1 for c in text if "0" <= c <= "9")


class Author(str):
    @classmethod
    def normalize(cls, raw: str) -> "Author":
        return cls(raw.strip())

    def as_str(self) -> str:
        return str(self)


class Title(str):
    @classmethod
    def normalize(cls, raw: str) -> "Title":
        return cls(raw.strip())

    def as_str(self) -> str:
        return str(self)


class Description(str):
    @classmethod
    def normalize(cls, raw: str) -> "Description":
        return cls(raw.strip())


class Price(int):
    """Unsigned price as an integer amount of currency units shown on the page."""

    @classmethod
    def parse(cls, raw: str) -> "Price":
        """
        Parse a displayed price like "1 299 ₽" or "$1,299".

        Thousands separators, non-breaking spaces and currency symbols are
        dropped; whatever remains must be all digits.

        Raises:
            InvalidPrice: If the remainder is empty or not all digits
        """
        cleaned = "".join(
            c
            for c in raw.strip()
            if c not in PRICE_SEPARATORS and unicodedata.category(c) != "Sc"
        )
        if not ASCII_DIGITS.fullmatch(cleaned):
            raise InvalidPrice(raw, "price is not a whole number")
        return cls(int(cleaned))


class Book(BaseModel):
    """A fully validated record. Never built from partial data."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    site: SourceId
    source: str
    authors: Tuple[Author, ...]
    isbn: Isbn
    title: Title
    description: Optional[Description] = None
    price: Optional[Price] = None
