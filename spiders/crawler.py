"""
列表页爬虫

从起始页开始沿“更多”链接逐页抓取，收集全部文章条目。
"""
from typing import Any, Dict, List
from loguru import logger

from spiders.base import BaseSpider
from core.models import ArticleRecord, ArticleStub

# 列表页之间的固定间隔（秒）
PAGE_DELAY = 1.0


class ListingCrawler(BaseSpider):
    """
    列表页爬虫

    - 串行抓取，每页之间间隔 PAGE_DELAY
    - 不重试：任何一页失败都直接抛给调用方（分页状态没有检查点）
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.stats.update({
            "pages_crawled": 0,
            "stubs_found": 0,
        })

    async def crawl(self, start_url: str) -> List[ArticleStub]:
        """
        爬取全部列表页

        Args:
            start_url: 起始列表页URL

        Returns:
            按页序、文档序排列的文章条目

        Raises:
            FetchError / aiohttp.ClientError: 任一列表页获取失败
        """
        stubs: List[ArticleStub] = []
        current_url = start_url

        while current_url:
            page_number = self.stats["pages_crawled"] + 1
            logger.info(f"📄 爬取第 {page_number} 页: {current_url}")

            html = await self.fetch_page(current_url)
            page = self.adapter.parse_listing(html, current_url)
            self.stats["pages_crawled"] += 1

            logger.info(f"✅ 发现 {len(page.stubs)} 篇文章")
            if not page.stubs:
                logger.warning(f"⚠️  第 {page_number} 页没有找到文章")
            stubs.extend(page.stubs)

            current_url = page.next_page
            if current_url:
                await self._sleep(PAGE_DELAY)

        self.stats["stubs_found"] = len(stubs)
        logger.success(f"🎉 爬取完成: {self.stats['pages_crawled']} 页, {len(stubs)} 篇文章")
        return stubs

    def get_statistics(self) -> Dict[str, Any]:
        return self.stats.copy()


def merge_stubs(existing: List[ArticleRecord], stubs: List[ArticleStub]) -> List[ArticleRecord]:
    """
    合并新爬取的条目到已有集合

    - 以 link 为键，按本次爬取顺序排列
    - 已有记录保留详情字段
    - 本次未出现的旧记录按原顺序追加在末尾

    Args:
        existing: 已持久化的集合
        stubs: 本次爬取结果

    Returns:
        合并后的集合
    """
    by_link = {record.link: record for record in existing}
    merged: List[ArticleRecord] = []
    seen = set()

    for stub in stubs:
        if stub.link in seen:
            continue
        seen.add(stub.link)
        merged.append(by_link.get(stub.link) or ArticleRecord.from_stub(stub))

    for record in existing:
        if record.link not in seen:
            seen.add(record.link)
            merged.append(record)

    return merged
