import sys
import os

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT_DIR)

import httpx
import pytest

from crawler.fetch import RetryPolicy


LABIRINT_HTML = """
<!DOCTYPE html>
<html>
<body>
    <div class="_left_u86in_12">
        <div>
            <div>Автор:</div>
            <div>Лев Толстой</div>
        </div>
    </div>
    <div class="_right_u86in_12">
        <div>Placeholder</div>
        <div>
            <div>ISBN Label</div>
            <div>978-5-17-123456-7</div>
        </div>
    </div>
    <h1 class="_h1_5o36c_18">Война и мир</h1>
</body>
</html>
"""

IGRASLOV_HTML = """
<html>
<body>
  <h1 class="single-post-title">  Игра в бисер </h1>
  <div class="summary">
    <p class="price"><span class="woocommerce-Price-amount amount"><bdi>1&nbsp;250&nbsp;<span class="woocommerce-Price-currencySymbol">&#8381;</span></bdi></span></p>
  </div>
  <table class="woocommerce-product-attributes shop_attributes">
    <tr class="woocommerce-product-attributes-item"><th>Автор</th><td><p><a href="/a/hesse">Герман Гессе</a></p></td></tr>
    <tr class="woocommerce-product-attributes-item"><th>Переводчик</th><td><p>В. Седельник</p></td></tr>
    <tr class="woocommerce-product-attributes-item"><th>Издательство</th><td><p>АСТ</p></td></tr>
    <tr class="woocommerce-product-attributes-item"><th>Год</th><td><p>2021</p></td></tr>
    <tr class="woocommerce-product-attributes-item"><th>Страниц</th><td><p>512</p></td></tr>
    <tr class="woocommerce-product-attributes-item"><th>Переплёт</th><td><p>твёрдый</p></td></tr>
    <tr class="woocommerce-product-attributes-item"><th>ISBN</th><td><p>5-17-000000-1;&nbsp;978-5-17-098225-6</p></td></tr>
  </table>
</body>
</html>
"""

EKSMO_HTML = """
<html>
<body>
  <div class="book-page__card">
    <h1 class="book-page__card-title">Мастер и Маргарита</h1>
    <div class="book-page__card-author"><a href="/authors/bulgakov/">Михаил Булгаков</a></div>
    <div class="book-page__card-isbn">ISBN: <span>978-5-04-116693-9</span></div>
    <div class="book-page__card-price"><span itemprop="price" content="599">599 ₽</span></div>
    <div class="book-page__card-description">
      Роман о визите дьявола в Москву.
    </div>
  </div>
</body>
</html>
"""


@pytest.fixture
def sleeps():
    """List that collects every backoff wait requested by a RetryPolicy."""
    return []


@pytest.fixture
def fast_policy(sleeps):
    """
    RetryPolicy with one retry whose sleep only records the wait.

    Args:
        sleeps: fixture list the fake sleep appends to

    Returns:
        RetryPolicy: max_retries=1, backoff_cap=8
    """

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    return RetryPolicy(max_retries=1, backoff_cap=8.0, sleep=fake_sleep)


def make_client(handler):
    """AsyncClient that answers every request with ``handler(request)``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def sequence_handler(responses, calls):
    """
    Handler replaying ``responses`` in order, one per request.

    Items may be httpx.Response objects or exceptions to raise. Every
    request URL is appended to ``calls``.
    """
    queue = list(responses)

    def handler(request):
        calls.append(str(request.url))
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    return handler
