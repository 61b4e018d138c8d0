"""
图片下载器模块

- 由文章集合生成去重的下载队列（按文章日期分目录）
- 已存在的目标文件跳过，重复运行不会重复下载
- 每批 5 个并发，批次之间间隔 500ms
- 单张图片最多尝试 3 次，指数退避 2s / 4s
- 先写 <目标>.tmp，再原子 rename 到目标路径
"""
import aiohttp
import asyncio
import hashlib
import os
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional
from urllib.parse import urljoin, urlparse
from loguru import logger
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_exponential
from tqdm import tqdm

from config import ImageConfig, RequestConfig, config
from core.exceptions import FetchError
from core.fetcher import Fetcher
from core.models import ArticleRecord, DownloadTask

BATCH_SIZE = 5
BATCH_DELAY = 0.5
MAX_ATTEMPTS = 3
BACKOFF_MULTIPLIER = 2
BACKOFF_MAX = 8

RETRYABLE_ERRORS = (FetchError, aiohttp.ClientError, asyncio.TimeoutError, OSError)


def image_filename(url: str, qualify: bool = False) -> str:
    """
    从图片URL生成文件名

    取URL路径的最后一段（去掉查询参数）。qualify=True 时在扩展名前追加
    URL 的短哈希，避免不同图片同名。

    Args:
        url: 图片URL
        qualify: 是否追加哈希

    Returns:
        文件名
    """
    name = os.path.basename(urlparse(url).path)
    if not name:
        name = f"{hashlib.md5(url.encode()).hexdigest()[:12]}.jpg"
    if qualify:
        stem, ext = os.path.splitext(name)
        name = f"{stem}-{hashlib.sha1(url.encode()).hexdigest()[:10]}{ext}"
    return name


class ImageDownloader:
    """图片下载器"""

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        image_config: Optional[ImageConfig] = None,
        request_config: Optional[RequestConfig] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.config = image_config or config.image
        self.fetcher = fetcher or Fetcher(request_config or config.request_config())
        self._sleep = sleep or asyncio.sleep
        self.download_stats = {
            "queued": 0,
            "skipped": 0,
            "collisions": 0,
            "downloaded": 0,
            "failed": 0,
        }

    async def __aenter__(self):
        """异步上下文管理器入口"""
        await self.fetcher.open()
        logger.info("Image downloader initialized")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器出口"""
        await self.fetcher.close()
        logger.info(f"Download stats: {self.download_stats}")

    @property
    def download_dir(self) -> Path:
        return Path(self.config.download_dir)

    def destination_for(self, record: ArticleRecord, url: str) -> Path:
        """图片的本地保存路径: <download_dir>/<YYYY-MM-DD>/<文件名>"""
        return self.download_dir / record.date_bucket() / image_filename(url, self.config.qualify_filenames)

    def build_queue(self, collection: List[ArticleRecord]) -> List[DownloadTask]:
        """
        生成下载队列

        - 为有图片的文章创建日期目录
        - 目标文件已存在则跳过
        - 同一目标路径只入队一次；不同URL映射到同一文件名时记录冲突

        Args:
            collection: 文章集合

        Returns:
            下载任务列表
        """
        tasks: List[DownloadTask] = []
        claimed: Dict[Path, str] = {}

        for record in collection:
            if not record.images:
                continue

            bucket_dir = self.download_dir / record.date_bucket()
            bucket_dir.mkdir(parents=True, exist_ok=True)

            for url in record.images:
                destination = self.destination_for(record, url)
                owner = claimed.get(destination)
                if owner is not None:
                    if owner != url:
                        self.download_stats["collisions"] += 1
                        logger.warning(f"⚠️  文件名冲突，跳过: {url} -> {destination} (已被 {owner} 占用)")
                    continue
                claimed[destination] = url

                if destination.exists():
                    self.download_stats["skipped"] += 1
                    logger.debug(f"  Skipping {url} (already exists)")
                    continue

                tasks.append(DownloadTask(source_url=urljoin(record.link, url), destination=destination))

        self.download_stats["queued"] = len(tasks)
        return tasks

    def _log_retry(self, retry_state: RetryCallState):
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(f"🔁 下载失败，{wait:.0f}s 后重试 (第 {retry_state.attempt_number} 次): {exc}")

    async def download_image(self, task: DownloadTask) -> bool:
        """
        下载单张图片（带重试）

        Args:
            task: 下载任务

        Returns:
            是否成功；最终失败只记录日志，不抛异常
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(MAX_ATTEMPTS),
            wait=wait_exponential(multiplier=BACKOFF_MULTIPLIER, max=BACKOFF_MAX),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await self._fetch_to_file(task)
        except RETRYABLE_ERRORS as e:
            self.download_stats["failed"] += 1
            logger.error(f"❌ Failed to download {task.source_url} after {MAX_ATTEMPTS} attempts: {e}")
            return False

        self.download_stats["downloaded"] += 1
        logger.debug(f"Downloaded: {task.destination.name}")
        return True

    async def _fetch_to_file(self, task: DownloadTask):
        """下载并写入临时文件，成功后原子替换到目标路径"""
        data = await self.fetcher.fetch_bytes(task.source_url)
        tmp_path = task.destination.with_name(task.destination.name + ".tmp")
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, task.destination)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    async def download_all(self, collection: List[ArticleRecord]) -> Dict[str, int]:
        """
        下载集合中全部图片

        每批 BATCH_SIZE 个任务并发执行，整批完成后才开始下一批。

        Args:
            collection: 文章集合

        Returns:
            下载统计
        """
        queue = self.build_queue(collection)
        total = len(queue)
        logger.info(f"🖼️  待下载图片: {total} (已存在跳过 {self.download_stats['skipped']})")
        if not queue:
            return self.get_stats()

        with tqdm(total=total, desc="下载图片", unit="img") as progress:
            for start in range(0, total, BATCH_SIZE):
                batch = queue[start:start + BATCH_SIZE]
                await asyncio.gather(*(self.download_image(task) for task in batch))
                progress.update(len(batch))

                if start + BATCH_SIZE < total:
                    await self._sleep(BATCH_DELAY)

        logger.success(
            f"✅ 图片下载完成: 成功 {self.download_stats['downloaded']}, 失败 {self.download_stats['failed']}"
        )
        return self.get_stats()

    def get_stats(self) -> Dict[str, int]:
        """获取下载统计"""
        return self.download_stats.copy()
