"""
爬虫模块

包含各种爬虫类：
- BaseSpider: 爬虫基类
- ListingCrawler: 列表页爬虫
- ArticleEnricher: 详情补全爬虫
- SpiderFactory: 爬虫工厂
"""
from spiders.base import BaseSpider
from spiders.crawler import ListingCrawler, merge_stubs
from spiders.enricher import ArticleEnricher
from spiders.spider_factory import SpiderFactory

__all__ = [
    'BaseSpider',
    'ListingCrawler',
    'ArticleEnricher',
    'SpiderFactory',
    'merge_stubs',
]
