"""
检查点管理器 - 暂存 / 提交协议

进度以完整集合的形式写入暂存文件（articles.tmp.json），每处理一篇文章写一次。
整轮处理结束后，暂存文件通过 os.replace 原子地提升为持久化文件；
中途崩溃时持久化文件保持上一次提交的完整版本，暂存文件可用于下次恢复。
"""
from typing import List, Optional
import os
from loguru import logger

from core.exceptions import PersistenceError
from core.models import ArticleRecord
from core.storage import Storage, fsync_dir, storage as default_storage


class CheckpointManager:
    """
    检查点管理器（基于 Storage 实现）

    stage() -> commit() 或 discard()
    """

    def __init__(self, storage: Optional[Storage] = None):
        self.storage = storage or default_storage
        self.stage_count = 0

    @property
    def staging_file(self):
        return self.storage.staging_file

    def exists(self) -> bool:
        """暂存文件是否存在"""
        return self.staging_file.exists()

    def stage(self, collection: List[ArticleRecord]):
        """
        写入暂存文件

        Raises:
            PersistenceError: 写入失败（致命）
        """
        self.storage.write(self.staging_file, collection)
        self.stage_count += 1
        logger.debug("Checkpoint staged ({} articles)", len(collection))

    def load_staged(self) -> Optional[List[ArticleRecord]]:
        """
        加载上次中断遗留的暂存文件

        Returns:
            暂存的集合；不存在返回 None，无法解析时删除并返回 None
        """
        if not self.exists():
            return None
        try:
            collection = self.storage.read(self.staging_file)
        except PersistenceError as e:
            logger.warning(f"⚠️  暂存文件损坏，已丢弃: {e}")
            self.discard()
            return None
        logger.info(f"🔄 从暂存文件恢复: {self.staging_file} ({len(collection)} 篇)")
        return collection

    def restore(self, collection: List[ArticleRecord]) -> int:
        """
        把暂存文件中已处理文章的详情按 link 合并进当前集合（原地修改）

        暂存文件只提供详情字段，集合的条目与顺序始终以传入的持久化集合为准；
        持久化集合中已不存在的暂存条目丢弃。

        Returns:
            恢复的文章数
        """
        staged = self.load_staged()
        if staged is None:
            return 0

        by_link = {record.link: record for record in collection}
        restored = 0
        orphaned = 0
        for staged_record in staged:
            if not staged_record.is_enriched:
                continue
            target = by_link.get(staged_record.link)
            if target is None:
                orphaned += 1
                continue
            before = target.model_dump()
            target.apply_details(staged_record.details())
            if target.model_dump() != before:
                restored += 1

        if orphaned:
            logger.warning(f"⚠️  暂存文件中 {orphaned} 篇文章已不在集合中，已忽略")
        logger.info(f"🔄 从暂存文件恢复 {restored} 篇文章的详情")
        return restored

    def commit(self):
        """
        将暂存文件原子提升为持久化文件

        Raises:
            PersistenceError: 暂存文件不存在或 rename 失败
        """
        target = self.storage.articles_file
        if not self.exists():
            raise PersistenceError(f"暂存文件不存在: {self.staging_file}")
        try:
            os.replace(self.staging_file, target)
            fsync_dir(target.parent)
        except OSError as e:
            raise PersistenceError(f"提交失败 {self.staging_file} -> {target}: {e}") from e
        logger.info(f"💾 Checkpoint committed: {target}")

    def discard(self):
        """删除暂存文件，持久化文件保持不变"""
        if self.exists():
            self.staging_file.unlink()
            logger.debug("Checkpoint discarded: {}", self.staging_file)
