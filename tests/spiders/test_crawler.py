"""
ListingCrawler / merge_stubs 单元测试
"""
import asyncio
import unittest
from unittest.mock import AsyncMock, call

from config import Config
from core.exceptions import FetchError
from core.models import ArticleRecord, ArticleStub
from parsers.derstandard import DerStandardAdapter
from spiders.crawler import PAGE_DELAY, ListingCrawler, merge_stubs
from tests.fakes import BASE, LISTING_PAGE_1, LISTING_PAGE_2, FakeFetcher


class TestListingCrawler(unittest.TestCase):
    def setUp(self):
        self.config = Config()
        self.sleep = AsyncMock()

    def make_crawler(self, fetcher):
        return ListingCrawler(self.config, DerStandardAdapter(self.config.site), fetcher=fetcher, sleep=self.sleep)

    def test_follows_next_page_until_exhausted(self):
        fetcher = FakeFetcher(pages={
            f"{BASE}/frontpage": LISTING_PAGE_1,
            f"{BASE}/frontpage/2": LISTING_PAGE_2,
        })
        crawler = self.make_crawler(fetcher)
        stubs = asyncio.run(crawler.crawl(f"{BASE}/frontpage"))

        self.assertEqual([s.title for s in stubs], ["Erste Geschichte", "Zweite Geschichte", "Dritte Geschichte"])
        self.assertEqual(fetcher.calls, [f"{BASE}/frontpage", f"{BASE}/frontpage/2"])
        self.assertEqual(self.sleep.await_args_list, [call(PAGE_DELAY)])

        stats = crawler.get_statistics()
        self.assertEqual(stats["pages_crawled"], 2)
        self.assertEqual(stats["stubs_found"], 3)
        self.assertEqual(stats["pages_fetched"], 2)

    def test_single_page_does_not_sleep(self):
        crawler = self.make_crawler(FakeFetcher(pages={f"{BASE}/p": LISTING_PAGE_2}))
        stubs = asyncio.run(crawler.crawl(f"{BASE}/p"))
        self.assertEqual(len(stubs), 1)
        self.sleep.assert_not_awaited()

    def test_page_without_stories(self):
        crawler = self.make_crawler(FakeFetcher(pages={f"{BASE}/p": "<html></html>"}))
        self.assertEqual(asyncio.run(crawler.crawl(f"{BASE}/p")), [])

    def test_fetch_error_propagates(self):
        fetcher = FakeFetcher(pages={
            f"{BASE}/frontpage": LISTING_PAGE_1,
            f"{BASE}/frontpage/2": FetchError(f"{BASE}/frontpage/2", 500),
        })
        crawler = self.make_crawler(fetcher)
        with self.assertRaises(FetchError):
            asyncio.run(crawler.crawl(f"{BASE}/frontpage"))
        self.assertEqual(crawler.get_statistics()["requests_failed"], 1)

    def test_context_manager_opens_and_closes_fetcher(self):
        fetcher = FakeFetcher()

        async def run():
            async with self.make_crawler(fetcher):
                self.assertTrue(fetcher.opened)

        asyncio.run(run())
        self.assertTrue(fetcher.closed)


class TestMergeStubs(unittest.TestCase):
    def test_new_collection_from_stubs(self):
        stubs = [ArticleStub(link="https://x/1", title="a"), ArticleStub(link="https://x/2", title="b")]
        merged = merge_stubs([], stubs)
        self.assertEqual([r.link for r in merged], ["https://x/1", "https://x/2"])
        self.assertFalse(merged[0].is_enriched)

    def test_keeps_enriched_fields_of_existing_records(self):
        existing = [ArticleRecord(link="https://x/1", title="a", raw_body_html="<p>x</p>", teaser="t", images=["i"])]
        merged = merge_stubs(existing, [ArticleStub(link="https://x/2"), ArticleStub(link="https://x/1", title="a")])
        self.assertEqual([r.link for r in merged], ["https://x/2", "https://x/1"])
        self.assertTrue(merged[1].is_enriched)
        self.assertEqual(merged[1].images, ["i"])

    def test_unseen_existing_records_are_appended(self):
        existing = [ArticleRecord(link="https://x/old")]
        merged = merge_stubs(existing, [ArticleStub(link="https://x/new")])
        self.assertEqual([r.link for r in merged], ["https://x/new", "https://x/old"])

    def test_duplicate_links_in_crawl(self):
        stubs = [ArticleStub(link="https://x/1", title="first"), ArticleStub(link="https://x/1", title="second")]
        merged = merge_stubs([], stubs)
        self.assertEqual(len(merged), 1)
        self.assertEqual(merged[0].title, "first")


if __name__ == "__main__":
    unittest.main()
