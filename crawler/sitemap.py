# crawler/sitemap.py
import logging
from itertools import chain, zip_longest
from typing import List, Sequence, Tuple

from bs4 import BeautifulSoup

from .errors import FetchError
from .fetch import fetch_text
from .sources.base import BookSource

logger = logging.getLogger("crawler.sitemap")

_SKIP = object()


def parse_sitemap(xml: str) -> Tuple[List[str], List[str]]:
    """
    Split a sitemap document into page locations and child sitemaps.

    Handles both <urlset> and <sitemapindex> roots. Prefixed tags such
    as <image:loc> are not mistaken for page locations.

    Returns:
        tuple: (page_urls, child_sitemap_urls), in document order
    """
    soup = BeautifulSoup(xml, "xml")
    pages = [_loc(u) for u in soup.find_all("url")]
    children = [_loc(s) for s in soup.find_all("sitemap")]
    return [p for p in pages if p], [c for c in children if c]


def _loc(entry):
    loc = entry.find("loc", recursive=False)
    return loc.get_text(strip=True) if loc else ""


async def collect_source_urls(source: BookSource, sitemap_url: str, limit: int) -> List[str]:
    """
    Collect up to ``limit`` book URLs for one source from its sitemap.

    Follows one level of sitemap index. A child sitemap that fails to
    load is skipped; a failing root sitemap yields no URLs. Only
    locations passing ``source.is_book_url`` are kept.

    Args:
        source (BookSource): Source the URLs are for; its client and retry
            policy are used for the sitemap requests too
        sitemap_url (str): Root sitemap or sitemap index
        limit (int): Maximum number of URLs to return

    Returns:
        list[str]: Book URLs in sitemap order
    """
    try:
        xml = await fetch_text(source.client, sitemap_url, source.retry_policy)
    except FetchError as e:
        logger.error(f"Sitemap unavailable for {source.site}: {e}")
        return []

    pages, children = parse_sitemap(xml)
    found = [u for u in pages if source.is_book_url(u)][:limit]

    for child in children:
        if len(found) >= limit:
            break
        try:
            xml = await fetch_text(source.client, child, source.retry_policy)
        except FetchError as e:
            logger.warning(f"Skipping child sitemap {child}: {e}")
            continue
        child_pages, _ = parse_sitemap(xml)
        found.extend(u for u in child_pages if source.is_book_url(u))
        found = found[:limit]

    logger.info(f"Collected {len(found)} URLs for {source.site} from {sitemap_url}")
    return found


def interleave(url_lists: Sequence[Sequence[str]]) -> List[str]:
    """
    Merge per-source URL lists round-robin: a1, b1, c1, a2, b2, ...

    Shorter lists simply drop out once exhausted.
    """
    merged = chain.from_iterable(zip_longest(*url_lists, fillvalue=_SKIP))
    return [u for u in merged if u is not _SKIP]
