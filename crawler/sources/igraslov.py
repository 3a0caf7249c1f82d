# crawler/sources/igraslov.py
from ..models import SourceId
from .base import BookSource, SelectorSet


class IgraSlovSource(BookSource):
    """
    igraslov.store, a WooCommerce shop.

    Authors and ISBN live in the product attributes table; the ISBN row
    is the seventh one. The shop rate-limits aggressively, so requests
    are never retried (the registry passes SINGLE_ATTEMPT).
    """

    site = SourceId.IGRASLOV
    host_fragment = "igraslov.store"
    book_path_markers = ("/product/",)
    selectors = SelectorSet.compile(
        authors=(
            "tr.woocommerce-product-attributes-item:nth-child(1) "
            "> td:nth-child(2) > p:nth-child(1) > a:nth-child(1)"
        ),
        title=".single-post-title",
        isbn=(
            "tr.woocommerce-product-attributes-item:nth-child(7) "
            "> td:nth-child(2) > p:nth-child(1)"
        ),
        price=".summary .price .woocommerce-Price-amount bdi",
    )
