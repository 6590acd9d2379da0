import dataclasses

import pytest

from product_crawler.engines.frontier import CrawlItem, Frontier, VisitedSet


def test_take_batch_preserves_fifo_order():
    frontier = Frontier()
    for i in range(5):
        frontier.push(CrawlItem(url=f"https://a.com/{i}", depth=i // 2))

    first = frontier.take_batch(2)
    assert [i.url for i in first] == ["https://a.com/0", "https://a.com/1"]
    assert len(frontier) == 3
    rest = frontier.take_batch(10)
    assert [i.url for i in rest] == ["https://a.com/2", "https://a.com/3", "https://a.com/4"]
    assert frontier.is_empty()
    assert frontier.take_batch(3) == []


def test_push_does_not_dedup():
    frontier = Frontier()
    frontier.push(CrawlItem("https://a.com/x", 1))
    frontier.push(CrawlItem("https://a.com/x", 1))
    assert len(frontier) == 2


def test_visited_set_mark_is_check_and_insert():
    visited = VisitedSet()
    assert visited.mark("https://a.com/x")
    assert not visited.mark("https://a.com/x")
    assert "https://a.com/x" in visited
    assert len(visited) == 1


def test_crawl_item_is_immutable():
    item = CrawlItem("https://a.com", 0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        item.depth = 3
    assert item.parent_url is None
