"""Shared fakes for the BlogEnhancer tests."""

from typing import Dict, List, Optional, Union

import pytest

from BlogEnhancer.Config import SiteProfile
from BlogEnhancer.Fetcher import Fetcher


class FakeFetcher(Fetcher):
    """Serves canned pages by URL; unknown URLs behave like a failed fetch."""

    def __init__(self, pages: Optional[Dict[str, Union[str, bytes]]] = None):
        self.pages = dict(pages or {})
        self.requested: List[str] = []
        self.close_calls = 0

    def get_content(self, url: str, **kwargs) -> Optional[bytes]:
        self.requested.append(url)
        page = self.pages.get(url)
        if page is None:
            return None
        return page.encode("utf-8") if isinstance(page, str) else page

    def close(self):
        self.close_calls += 1


@pytest.fixture
def site() -> SiteProfile:
    return SiteProfile()


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()
