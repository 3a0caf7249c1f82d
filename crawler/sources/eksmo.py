# crawler/sources/eksmo.py
from ..models import SourceId
from .base import BookSource, SelectorSet


class EksmoSource(BookSource):
    site = SourceId.EKSMO
    host_fragment = "eksmo.ru"
    book_path_markers = ("/book/",)
    selectors = SelectorSet.compile(
        authors=".book-page__card-author a",
        title="h1.book-page__card-title",
        isbn=".book-page__card-isbn span",
        description=".book-page__card-description",
        price=".book-page__card-price [itemprop='price']",
    )
