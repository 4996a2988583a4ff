"""Tests for BlogEnhancer.DateResolver."""

from datetime import date

from BlogEnhancer.DateResolver import (
    SENTINEL_DATE,
    find_container_date_text,
    is_sentinel,
    parse_date_text,
    resolve_listing_date,
)
from BlogEnhancer.HtmlTree import parse_html


class TestParseDateText:
    def test_month_day_year(self) -> None:
        assert parse_date_text("January 5, 2024") == date(2024, 1, 5)

    def test_abbreviated_month(self) -> None:
        assert parse_date_text("Feb 10, 2024") == date(2024, 2, 10)

    def test_iso_timestamp(self) -> None:
        assert parse_date_text("2024-02-10T08:00:00+00:00") == date(2024, 2, 10)

    def test_garbage_is_none(self) -> None:
        assert parse_date_text("not a date") is None

    def test_empty_is_none(self) -> None:
        assert parse_date_text("") is None
        assert parse_date_text(None) is None


class TestIsSentinel:
    def test_sentinel_and_none(self) -> None:
        assert is_sentinel(SENTINEL_DATE)
        assert is_sentinel(None)

    def test_real_date(self) -> None:
        assert not is_sentinel(date(2024, 1, 1))


class TestFindContainerDateText:
    def test_datetime_attribute_first(self) -> None:
        soup = parse_html('<article><time datetime="2024-01-05">5 days ago</time></article>')
        assert find_container_date_text(soup.article) == "2024-01-05"

    def test_date_labelled_element_text(self) -> None:
        soup = parse_html('<article><span class="post-date">March 24, 2025</span></article>')
        assert find_container_date_text(soup.article) == "March 24, 2025"

    def test_regex_over_container_text(self) -> None:
        soup = parse_html('<div class="card"><p>Posted on January 5, 2024 by Team</p></div>')
        assert find_container_date_text(soup.div) == "January 5, 2024"

    def test_slash_pattern(self) -> None:
        soup = parse_html('<div class="card"><p>Updated 12/01/2023</p></div>')
        assert find_container_date_text(soup.div) == "12/01/2023"

    def test_nothing_found(self) -> None:
        soup = parse_html('<div class="card"><p>No date here</p></div>')
        assert find_container_date_text(soup.div) is None
        assert find_container_date_text(None) is None


class TestResolveListingDate:
    def test_resolves_from_article_container(self) -> None:
        soup = parse_html(
            '<article><span class="post-date">March 24, 2025</span>'
            '<a href="/blogs/post/">Post</a></article>'
        )
        resolved, text = resolve_listing_date(soup.a)
        assert resolved == date(2025, 3, 24)
        assert text == "March 24, 2025"

    def test_no_container_gives_sentinel(self) -> None:
        soup = parse_html('<ul><li><a href="/blogs/post/">Post</a> January 5, 2024</li></ul>')
        assert resolve_listing_date(soup.a) == (SENTINEL_DATE, None)

    def test_unparseable_text_gives_sentinel(self) -> None:
        soup = parse_html('<article><span class="date">sometime</span><a href="/blogs/p/">P</a></article>')
        resolved, text = resolve_listing_date(soup.a)
        assert resolved == SENTINEL_DATE
        assert text == "sometime"
