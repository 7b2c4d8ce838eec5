import pytest

from social_listener.schemas.themes import RawRecord
from social_listener.services.records import (
    clamp_page,
    filter_records,
    page_window,
    paginate,
    record_stats,
    total_pages,
)


def make_records(n=100):
    aspects = ["pricing", "delivery", "returns", "staff", "app/ux"]
    return [
        {
            "id": i + 1,
            "text": f"Tweet {i + 1} about {'Delivery' if i % 2 else 'prices'}",
            "sentiment_label": "positive" if i % 3 == 1 else ("negative" if i % 3 == 2 else "neutral"),
            "aspect_dominant": aspects[i % 5],
        }
        for i in range(n)
    ]


def test_filter_and_paginate_positive_records():
    records = make_records()
    positive = filter_records(records, sentiment="positive")
    assert len(positive) == 33

    page = paginate(positive, page=2, page_size=20)
    assert page.total_pages == 2
    assert len(page.items) == 13
    assert page.items == positive[20:33]
    assert page.has_previous and not page.has_next


def test_filter_preserves_order_and_does_not_mutate():
    records = make_records()
    snapshot = [dict(r) for r in records]
    result = filter_records(records, search="delivery", aspect="staff")
    assert [r["id"] for r in result] == sorted(r["id"] for r in result)
    assert all("delivery" in r["text"].lower() and r["aspect_dominant"] == "staff" for r in result)
    assert records == snapshot


def test_search_is_case_insensitive_substring():
    records = make_records(10)
    assert filter_records(records, search="DELIVERY") == filter_records(records, search="delivery")
    assert len(filter_records(records, search="Tweet 1 ")) == 1


def test_all_means_no_constraint():
    records = make_records(20)
    assert filter_records(records, "", "all", "all") == records
    assert filter_records(records, None, None, None) == records


def test_filter_is_idempotent():
    records = make_records()
    once = filter_records(records, search="prices", sentiment="neutral")
    assert filter_records(once, search="prices", sentiment="neutral") == once


def test_filter_works_on_models():
    records = [
        RawRecord(id=1, text="Great prices", created_at="2024-01-05", sentiment_label="positive",
                  sentiment_score=0.8, aspect_dominant="pricing"),
        RawRecord(id=2, text="Late delivery", created_at="2024-01-06", sentiment_label="negative",
                  sentiment_score=-0.6, aspect_dominant="delivery"),
    ]
    assert [r.id for r in filter_records(records, search="late")] == [2]
    assert [r.id for r in filter_records(records, aspect="pricing")] == [1]


def test_empty_result_has_no_pages():
    page = paginate([], page=1, page_size=20)
    assert page.total_pages == 0
    assert page.items == []
    assert not page.has_next


def test_stale_page_beyond_end_is_empty():
    page = paginate(make_records(5), page=4, page_size=20)
    assert page.items == []
    assert page.total_pages == 1


@pytest.mark.parametrize("count, size, expected", [(0, 20, 0), (1, 20, 1), (20, 20, 1), (21, 20, 2), (100, 20, 5)])
def test_total_pages(count, size, expected):
    assert total_pages(count, size) == expected


def test_total_pages_rejects_non_positive_size():
    with pytest.raises(ValueError):
        total_pages(10, 0)


def test_page_controls():
    assert page_window(0) == []
    assert page_window(3) == [1, 2, 3]
    assert page_window(12) == [1, 2, 3, 4, 5]
    assert clamp_page(0, 4) == 1
    assert clamp_page(9, 4) == 4
    assert clamp_page(3, 0) == 1


def test_record_stats():
    records = make_records(9)
    stats = record_stats(records, filter_records(records, sentiment="positive"))
    assert stats.total == 9
    assert stats.sentiment_counts == {"positive": 3, "neutral": 3, "negative": 3}
    assert stats.sentiment_percent == {"positive": 33.3, "neutral": 33.3, "negative": 33.3}
    assert stats.aspect_counts["pricing"] == 2
    assert stats.filtered == 3


def test_record_stats_of_empty_set():
    stats = record_stats([])
    assert stats.total == 0
    assert stats.sentiment_percent == {"positive": 0.0, "neutral": 0.0, "negative": 0.0}
    assert stats.filtered is None
