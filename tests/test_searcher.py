"""Tests for BlogEnhancer.Searcher."""

import pytest

from BlogEnhancer.Searcher import (
    GoogleSearcher,
    ReferenceLink,
    SearchError,
    has_blog_signal,
    is_denied_host,
    is_document_url,
)

from conftest import FakeFetcher

RESULTS_PAGE = """
<html><body>
<div class="g"><a href="https://medium.com/@sam/chatbots-guide"><h3>Chatbots Guide for Teams</h3></a></div>
<div class="g"><a href="https://www.youtube.com/watch?v=abc">Watch: chatbots explained</a></div>
<div class="g"><a href="https://shop.example.com/chatbots">Buy chatbots now</a></div>
<div class="g"><a href="https://example.dev/blog/chatbot-trends">Chatbot trends this year</a></div>
<div class="g"><a href="https://example.dev/blog/chatbot-trends">Chatbot trends (again)</a></div>
<div class="g"><a href="https://papers.example.org/chatbots.pdf">Chatbots whitepaper</a></div>
</body></html>
"""

SOCIAL_ONLY_PAGE = """
<html><body>
<div class="g"><a href="https://www.youtube.com/watch?v=abc">A video about it</a></div>
<div class="g"><a href="https://www.facebook.com/somepage">A social post</a></div>
<a href="https://www.google.com/search?q=next">Next page</a>
</body></html>
"""


def searcher_for(pages_by_query) -> GoogleSearcher:
    probe = GoogleSearcher(FakeFetcher())
    pages = {probe.query_url(query): page for query, page in pages_by_query.items()}
    return GoogleSearcher(FakeFetcher(pages))


class TestUrlFilters:
    @pytest.mark.parametrize("url", [
        "https://www.google.com/url?q=x",
        "https://maps.google.co.uk/",
        "https://youtu.be/abc",
        "https://m.facebook.com/page",
        "https://x.com/someone",
        "not a url",
    ])
    def test_denied(self, url) -> None:
        assert is_denied_host(url)

    def test_lookalike_host_is_allowed(self) -> None:
        assert not is_denied_host("https://notyoutube.company.dev/post")

    def test_documents(self) -> None:
        assert is_document_url("https://x.dev/file.PDF")
        assert not is_document_url("https://x.dev/pdf-tools-review")

    def test_blog_signal(self) -> None:
        assert has_blog_signal("https://dev.to/sam/chatbots")
        assert not has_blog_signal("https://shop.example.com/chatbots")


class TestQueries:
    def test_short_title_gets_keywords(self) -> None:
        assert GoogleSearcher.build_query("AI and Search") == "AI and Search article blog"

    def test_long_title_is_truncated(self) -> None:
        title = "How Conversational Agents Are Reshaping Customer Support In Every Industry"
        assert GoogleSearcher.build_query(title) == title[:50]

    def test_simplified_query_keeps_first_words(self) -> None:
        assert GoogleSearcher.simplify_query("Chatbots in 2024 and beyond") == "Chatbots in 2024"

    def test_query_url_is_encoded(self) -> None:
        searcher = GoogleSearcher(FakeFetcher())
        assert searcher.query_url("AI & search") == "https://www.google.com/search?q=AI+%26+search"


class TestParseResults:
    def test_filters_and_dedupes(self) -> None:
        links = GoogleSearcher(FakeFetcher()).parse_results(RESULTS_PAGE.encode())
        assert [link.url for link in links] == [
            "https://medium.com/@sam/chatbots-guide",
            "https://shop.example.com/chatbots",
            "https://example.dev/blog/chatbot-trends",
        ]
        assert links[0].title == "Chatbots Guide for Teams"

    def test_title_from_surrounding_heading(self) -> None:
        page = '<div class="g"><h3>Heading From Result</h3><a href="https://a.dev/blog/x"></a></div>'
        links = GoogleSearcher(FakeFetcher()).parse_results(page.encode())
        assert links[0].title == "Heading From Result"

    def test_short_title_falls_back_to_url(self) -> None:
        page = '<div class="g"><a href="https://a.dev/blog/deep-dive-guide">Go</a></div>'
        links = GoogleSearcher(FakeFetcher()).parse_results(page.encode())
        assert links[0].title == "Deep Dive Guide"

    def test_generic_strategy_when_result_blocks_missing(self) -> None:
        page = '<p><a href="https://a.dev/posts/one">A post about bots</a></p>'
        links = GoogleSearcher(FakeFetcher()).parse_results(page.encode())
        assert [link.url for link in links] == ["https://a.dev/posts/one"]

    def test_candidate_cap(self) -> None:
        page = ''.join(f'<div class="g"><a href="https://a.dev/blog/p{i}">Post number {i}</a></div>'
                       for i in range(20))
        searcher = GoogleSearcher(FakeFetcher(), max_candidates=4)
        assert len(searcher.parse_results(page.encode())) == 4

    def test_social_only_page_has_no_results(self) -> None:
        assert GoogleSearcher(FakeFetcher()).parse_results(SOCIAL_ONLY_PAGE.encode()) == []


class TestRank:
    def test_prefers_blog_links_when_enough(self) -> None:
        links = [
            ReferenceLink(url="https://shop.dev/a", title="Shop"),
            ReferenceLink(url="https://x.dev/blog/a", title="Blog A"),
            ReferenceLink(url="https://medium.com/b", title="Blog B"),
        ]
        ranked = GoogleSearcher(FakeFetcher()).rank(links)
        assert [link.url for link in ranked] == ["https://x.dev/blog/a", "https://medium.com/b"]

    def test_keeps_order_when_too_few_blog_links(self) -> None:
        links = [
            ReferenceLink(url="https://shop.dev/a", title="Shop"),
            ReferenceLink(url="https://x.dev/blog/a", title="Blog A"),
            ReferenceLink(url="https://news.dev/c", title="News"),
        ]
        ranked = GoogleSearcher(FakeFetcher()).rank(links)
        assert [link.url for link in ranked] == ["https://shop.dev/a", "https://x.dev/blog/a"]


class TestFindReferences:
    def test_first_query_results(self) -> None:
        searcher = searcher_for({"AI and Search article blog": RESULTS_PAGE})
        links = searcher.find_references("AI and Search")
        assert [link.url for link in links] == [
            "https://medium.com/@sam/chatbots-guide",
            "https://example.dev/blog/chatbot-trends",
        ]

    def test_retries_with_simplified_query(self) -> None:
        title = "Chatbots in 2024 and beyond"
        searcher = searcher_for({
            title: SOCIAL_ONLY_PAGE,
            "Chatbots in 2024": RESULTS_PAGE,
        })
        links = searcher.find_references(title)
        assert len(links) == 2
        assert len(searcher.fetcher.requested) == 2
        assert any("retrying" in message for message in searcher.log_messages)

    def test_social_only_results_raise_after_retry(self) -> None:
        title = "Chatbots in 2024 and beyond"
        searcher = searcher_for({
            title: SOCIAL_ONLY_PAGE,
            "Chatbots in 2024": SOCIAL_ONLY_PAGE,
        })
        with pytest.raises(SearchError):
            searcher.find_references(title)
        assert len(searcher.fetcher.requested) == 2

    def test_unreachable_search_engine_raises(self) -> None:
        with pytest.raises(SearchError):
            GoogleSearcher(FakeFetcher()).find_references("Anything at all")
