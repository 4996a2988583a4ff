"""Tests for BlogEnhancer.Ordering."""

from datetime import date
from types import SimpleNamespace

from BlogEnhancer.DateResolver import SENTINEL_DATE
from BlogEnhancer.Ordering import dedupe_by_url, partition_dated, select_oldest


def item(url: str, listing_date: date = SENTINEL_DATE, tag: str = "") -> SimpleNamespace:
    return SimpleNamespace(url=url, listing_date=listing_date, tag=tag)


class TestDedupeByUrl:
    def test_first_occurrence_wins(self) -> None:
        items = [item("a", tag="first"), item("b"), item("a", tag="second")]
        result = dedupe_by_url(items)
        assert [i.url for i in result] == ["a", "b"]
        assert result[0].tag == "first"

    def test_exact_string_match(self) -> None:
        result = dedupe_by_url([item("https://x/a/"), item("https://x/a")])
        assert len(result) == 2


class TestPartitionDated:
    def test_splits_on_sentinel(self) -> None:
        dated, undated = partition_dated([item("a", date(2024, 1, 1)), item("b"), item("c", None)])
        assert [i.url for i in dated] == ["a"]
        assert [i.url for i in undated] == ["b", "c"]


class TestSelectOldest:
    def test_ascending_and_truncated(self) -> None:
        items = [
            item("jan", date(2024, 1, 5)),
            item("feb", date(2024, 2, 10)),
            item("dec", date(2023, 12, 1)),
            item("none"),
        ]
        assert [i.url for i in select_oldest(items, 3)] == ["dec", "jan", "feb"]

    def test_stable_for_equal_dates(self) -> None:
        same = date(2024, 3, 1)
        items = [item("first", same), item("second", same), item("older", date(2024, 1, 1))]
        assert [i.url for i in select_oldest(items, 3)] == ["older", "first", "second"]

    def test_undated_dropped_when_any_dated(self) -> None:
        items = [item("u1"), item("d1", date(2024, 5, 1)), item("u2")]
        assert [i.url for i in select_oldest(items, 5)] == ["d1"]

    def test_all_undated_keeps_discovery_order(self) -> None:
        items = [item("x"), item("y"), item("z")]
        assert [i.url for i in select_oldest(items, 2)] == ["x", "y"]

    def test_duplicates_removed_before_sorting(self) -> None:
        items = [item("a", date(2024, 2, 1)), item("a", date(2020, 1, 1)), item("b", date(2024, 1, 1))]
        result = select_oldest(items, 5)
        assert [i.url for i in result] == ["b", "a"]
        assert len({i.url for i in result}) == len(result)

    def test_non_positive_count(self) -> None:
        assert select_oldest([item("a", date(2024, 1, 1))], 0) == []

    def test_custom_date_key(self) -> None:
        items = [SimpleNamespace(url="a", published=date(2024, 2, 1)),
                 SimpleNamespace(url="b", published=date(2024, 1, 1))]
        result = select_oldest(items, 2, date_key=lambda i: i.published)
        assert [i.url for i in result] == ["b", "a"]
