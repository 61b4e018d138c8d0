"""
CLI命令处理函数

每个处理函数返回进程退出码：0 成功，1 致命错误
（未知配置、集合文件缺失、持久化失败、列表页获取失败）。
"""
import asyncio
from typing import Any, Dict, List, Optional
import aiohttp
from loguru import logger

from config import Config, config as global_config, get_site_config
from spiders import SpiderFactory, merge_stubs
from core.exceptions import CollectionNotFoundError, FetchError, PersistenceError
from core.models import ArticleRecord
from core.checkpoint import CheckpointManager
from core.storage import Storage

STAT_LABELS = {
    "pages_crawled": "列表页",
    "stubs_found": "发现文章",
    "articles_total": "文章总数",
    "articles_updated": "更新文章",
    "articles_skipped": "跳过文章",
    "articles_failed": "失败文章",
    "queued": "待下载图片",
    "skipped": "已存在跳过",
    "collisions": "文件名冲突",
    "downloaded": "下载成功",
    "failed": "下载失败",
}


def resolve_config(args) -> Config:
    """--config 指定时加载 configs/<name>.json，否则使用环境变量配置"""
    name = getattr(args, 'config', None)
    if name:
        logger.info(f"📁 使用配置文件: {name}")
        return get_site_config(name)
    return global_config


def load_config(args) -> Optional[Config]:
    """解析配置；未知的配置名记录错误并返回 None"""
    try:
        return resolve_config(args)
    except ValueError as e:
        logger.error(f"❌ {e}")
        return None


def print_statistics(title: str, stats: Dict[str, Any]):
    """输出统计信息"""
    print("\n" + "=" * 60)
    print(f"📊 {title}:")
    for key, label in STAT_LABELS.items():
        if key in stats:
            print(f"  {label}: {stats[key]}")
    print("=" * 60)


async def _enrich(cfg: Config, force: bool) -> List[ArticleRecord]:
    enricher = SpiderFactory.create(config=cfg, spider_type='enrich')
    async with enricher:
        collection = await enricher.run(force=force)
    print_statistics("补全统计", enricher.get_statistics())
    return collection


async def _download(cfg: Config, collection: List[ArticleRecord]):
    downloader = SpiderFactory.create_downloader(config=cfg)
    async with downloader:
        stats = await downloader.download_all(collection)
    print_statistics("下载统计", stats)


async def handle_crawl(args, cfg: Optional[Config] = None) -> int:
    """处理 crawl 子命令"""
    cfg = cfg or load_config(args)
    if cfg is None:
        return 1
    start_url: Optional[str] = args.start_url or cfg.site.start_url
    if not start_url:
        logger.error("❌ 请指定 --start-url 或在配置中设置 start_url")
        return 1

    crawler = SpiderFactory.create(config=cfg, spider_type='crawl')
    try:
        async with crawler:
            stubs = await crawler.crawl(start_url)
    except (FetchError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error(f"❌ 列表页获取失败，已爬取的条目未保存: {e}")
        return 1

    store = Storage(cfg.storage)
    checkpoint = CheckpointManager(store)
    try:
        existing = store.load_or_empty()
        # 先补回上次中断的补全结果，再合并新条目
        checkpoint.restore(existing)
        merged = merge_stubs(existing, stubs)
        store.save(merged)
        checkpoint.discard()
    except PersistenceError as e:
        logger.error(f"❌ 保存失败: {e}")
        return 1

    stats = crawler.get_statistics()
    stats["articles_total"] = len(merged)
    print_statistics("爬取统计", stats)
    return 0


async def handle_enrich(args, cfg: Optional[Config] = None) -> int:
    """处理 enrich 子命令"""
    cfg = cfg or load_config(args)
    if cfg is None:
        return 1
    try:
        await _enrich(cfg, args.force)
    except CollectionNotFoundError as e:
        logger.error(f"❌ 文章集合不存在，请先运行 crawl: {e}")
        return 1
    except PersistenceError as e:
        logger.error(f"❌ 持久化失败: {e}")
        return 1
    return 0


async def handle_download(args, cfg: Optional[Config] = None) -> int:
    """处理 download 子命令"""
    cfg = cfg or load_config(args)
    if cfg is None:
        return 1
    try:
        collection = Storage(cfg.storage).load()
    except PersistenceError as e:
        logger.error(f"❌ 无法读取文章集合: {e}")
        return 1
    await _download(cfg, collection)
    return 0


async def handle_run(args, cfg: Optional[Config] = None) -> int:
    """处理 run 子命令：补全 + 下载"""
    cfg = cfg or load_config(args)
    if cfg is None:
        return 1
    try:
        collection = await _enrich(cfg, args.force)
    except CollectionNotFoundError as e:
        logger.error(f"❌ 文章集合不存在，请先运行 crawl: {e}")
        return 1
    except PersistenceError as e:
        logger.error(f"❌ 持久化失败: {e}")
        return 1
    await _download(cfg, collection)
    return 0


HANDLERS = {
    'crawl': handle_crawl,
    'enrich': handle_enrich,
    'download': handle_download,
    'run': handle_run,
}
