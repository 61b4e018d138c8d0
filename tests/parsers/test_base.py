"""
SiteAdapter 基类单元测试
"""
import unittest
from bs4 import BeautifulSoup

from config import SiteConfig
from parsers.base import SiteAdapter, clean_text


class _MinimalAdapter(SiteAdapter):
    """只实现抽象方法，用于测试基类工具方法"""

    def parse_stubs(self, soup, page_url):
        return []

    def find_next_page(self, soup, page_url):
        return None

    def walk_content(self, body):
        return []

    def extract_teaser_and_author(self, soup):
        return "teaser", None


class TestCleanText(unittest.TestCase):
    def test_collapses_whitespace_and_nbsp(self):
        self.assertEqual(clean_text("  a \n\t b  c  "), "a b c")

    def test_empty(self):
        self.assertEqual(clean_text("   \n"), "")


class TestSiteAdapterBase(unittest.TestCase):
    def setUp(self):
        self.adapter = _MinimalAdapter(SiteConfig())

    def test_cannot_instantiate_abstract_base(self):
        with self.assertRaises(TypeError):
            SiteAdapter(SiteConfig())

    def test_get_image_url_priority(self):
        soup = BeautifulSoup(
            '<img data-fullscreen-src="full" src="std" data-src="lazy">'
            '<img src="std" data-src="lazy">'
            '<img data-src="lazy">'
            '<img>',
            'lxml'
        )
        urls = [self.adapter.get_image_url(img) for img in soup.find_all('img')]
        self.assertEqual(urls, ["full", "std", "lazy", None])

    def test_collect_images_dedup_first_occurrence(self):
        soup = BeautifulSoup(
            '<div><img src="a"><p><img src="b"></p><img data-src="a"><img></div>',
            'lxml'
        )
        self.assertEqual(self.adapter.collect_images(soup.div), ["a", "b"])

    def test_parse_article_without_body_degrades(self):
        details = self.adapter.parse_article("<html><body><p>kein Body</p></body></html>")
        self.assertEqual(details.images, [])
        self.assertEqual(details.content, [])
        self.assertEqual(details.raw_body_html, "")
        self.assertEqual(details.teaser, "teaser")

    def test_parse_listing_returns_listing_page(self):
        page = self.adapter.parse_listing("<html></html>", "https://x/")
        self.assertEqual(page.stubs, [])
        self.assertIsNone(page.next_page)


if __name__ == "__main__":
    unittest.main()
