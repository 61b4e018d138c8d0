"""
文章详情补全

逐篇抓取详情页、解析正文并写回集合。每处理一篇（无论成功失败）都暂存整个集合，
整轮结束后原子提交。
"""
from typing import Any, Dict, List, Optional
from loguru import logger

from spiders.base import BaseSpider
from core.checkpoint import CheckpointManager
from core.models import ArticleRecord
from core.storage import Storage

# 详情页之间的固定间隔（秒）
ARTICLE_DELAY = 0.25


class ArticleEnricher(BaseSpider):
    """
    详情补全爬虫

    - 已处理的文章（raw_body_html 与 teaser 均存在）默认跳过，不发请求
    - 单篇失败只记录日志，继续处理下一篇
    - 暂存/提交失败属于致命错误，直接抛出
    """

    def __init__(self, *args, storage: Optional[Storage] = None, checkpoint: Optional[CheckpointManager] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.storage = storage or Storage(self.config.storage)
        self.checkpoint = checkpoint or CheckpointManager(self.storage)
        self.resumed = False
        self.stats.update({
            "articles_total": 0,
            "articles_updated": 0,
            "articles_skipped": 0,
            "articles_failed": 0,
        })

    def load_collection(self) -> List[ArticleRecord]:
        """
        加载待处理集合

        以持久化文件为准；上次中断遗留的暂存文件只按 link 补回已处理文章的详情，
        不会覆盖之后新爬取的条目。

        Raises:
            CollectionNotFoundError: 持久化文件不存在
        """
        collection = self.storage.load()
        if self.checkpoint.restore(collection) > 0:
            self.resumed = True
            # 暂存文件改为合并后的集合，提交时不会带回旧快照
            self.checkpoint.stage(collection)
        return collection

    async def enrich(self, collection: List[ArticleRecord], force: bool = False) -> List[ArticleRecord]:
        """
        补全集合中的文章详情（原地修改）

        Args:
            collection: 文章集合
            force: 是否重新处理已处理的文章

        Returns:
            更新后的集合
        """
        total = len(collection)
        self.stats["articles_total"] = total
        logger.info(f"📚 共 {total} 篇文章待检查")

        fetched_before = False
        for index, record in enumerate(collection):
            remaining = total - index - 1

            if record.is_enriched and not force:
                self.stats["articles_skipped"] += 1
                logger.debug(f"  Skipping {record.title} (already processed)")
                continue

            if fetched_before:
                await self._sleep(ARTICLE_DELAY)
            fetched_before = True

            try:
                html = await self.fetch_page(record.link)
                details = self.adapter.parse_article(html)
            except Exception as e:
                self.stats["articles_failed"] += 1
                logger.error(f"❌ 处理失败 {record.title}: {e}")
                logger.info(f"   剩余 {remaining} 篇")
                self.checkpoint.stage(collection)
                continue

            record.apply_details(details)
            self.stats["articles_updated"] += 1
            logger.info(f"✅ 已更新: {record.title}")
            logger.debug(f"   发现 {len(details.images)} 张图片")
            logger.info(f"   剩余 {remaining} 篇")
            self.checkpoint.stage(collection)

        return collection

    def finalize(self) -> bool:
        """
        结束本轮：有更新（或从暂存恢复）则提交，否则丢弃暂存文件

        Returns:
            是否提交
        """
        if self.stats["articles_updated"] > 0 or self.resumed:
            self.checkpoint.commit()
            logger.success(f"✨ 完成！更新 {self.stats['articles_updated']} 篇文章")
            return True

        self.checkpoint.discard()
        logger.success("✨ 完成！没有需要更新的文章")
        return False

    async def run(self, force: bool = False) -> List[ArticleRecord]:
        """加载 → 补全 → 提交"""
        if force:
            logger.warning("⚠️  强制重新提取已启用，将处理全部文章")
        collection = self.load_collection()
        await self.enrich(collection, force=force)
        self.finalize()
        return collection

    def get_statistics(self) -> Dict[str, Any]:
        return self.stats.copy()
