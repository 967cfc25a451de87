"""
Shared pytest fixtures: a scripted fetcher and the HTML page fixtures.
Ensures the project root is importable when running pytest from the repo.
"""
import asyncio
import sys
from pathlib import Path

import pytest

_root = Path(__file__).resolve().parent.parent
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from discovery.cache import CameraCache
from discovery.config import load_config
from discovery.errors import HttpError
from discovery.service import CameraDiscoveryService

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures" / "html"

LIST_ROUTE = "query-cam-list-by-coordinate"


class FakeFetcher:
    """
    Stands in for ProxyFetcher. `routes` maps a URL substring to page text
    (or an exception to raise); unmatched URLs raise HttpError(404).
    Records every call and the peak number of overlapping fetches.
    """

    def __init__(self, routes=None, delay=0.0):
        self.routes = dict(routes or {})
        self.delay = delay
        self.calls = []
        self.active = 0
        self.max_active = 0

    async def fetch(self, url):
        self.calls.append(url)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            for needle, page in self.routes.items():
                if needle in url:
                    if isinstance(page, BaseException):
                        raise page
                    return page
            raise HttpError(404, url)
        finally:
            self.active -= 1

    def count(self, needle):
        return sum(1 for u in self.calls if needle in u)


def read_fixture(name):
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def list_html():
    return read_fixture("list_page.html")


@pytest.fixture
def mixed_list_html():
    return read_fixture("list_page_mixed.html")


@pytest.fixture
def detail_html():
    return read_fixture("detail_page.html")


@pytest.fixture
def lat_only_html():
    return read_fixture("detail_lat_only.html")


@pytest.fixture
def config():
    # defaults only; never picks up a local config/params.yaml
    return load_config(path=None)


@pytest.fixture
def make_service(config):
    """Build a CameraDiscoveryService around a FakeFetcher with the given routes."""
    def _make(routes=None, delay=0.0, cache=None):
        fetcher = FakeFetcher(routes, delay=delay)
        svc = CameraDiscoveryService(fetcher=fetcher, cache=cache or CameraCache(), config=config)
        return svc, fetcher
    return _make
