"""
爬虫基类模块

包含爬虫的抽象基类：
- BaseSpider: 爬虫基类
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional
from loguru import logger

from config import Config
from core.fetcher import Fetcher
from parsers.base import SiteAdapter


class BaseSpider(ABC):
    """
    爬虫基类

    所有爬虫的公共基类，提供：
    - Fetcher（HTTP Session）管理
    - 站点适配器
    - 统计信息
    - 异步上下文管理

    子类需要实现:
    - get_statistics(): 获取统计信息
    """

    def __init__(
        self,
        config: Config,
        adapter: SiteAdapter,
        fetcher: Optional[Fetcher] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """
        初始化爬虫

        Args:
            config: 配置对象
            adapter: 站点适配器
            fetcher: 可选的 Fetcher（测试时注入假实现）
            sleep: 可选的延迟函数（测试时注入）
        """
        self.config = config
        self.adapter = adapter
        self.fetcher = fetcher or Fetcher(config.request_config())
        self._sleep = sleep or asyncio.sleep

        # 基础统计信息
        self.stats = {
            'pages_fetched': 0,
            'requests_failed': 0,
        }

    async def __aenter__(self):
        """异步上下文管理器入口"""
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器出口"""
        await self.close()

    async def init(self):
        """
        初始化爬虫

        子类应该调用 super().init() 并添加特定初始化逻辑
        """
        logger.info("⚙️  初始化爬虫组件...")
        await self.fetcher.open()

    async def close(self):
        """
        关闭爬虫

        子类应该先执行特定清理逻辑，再调用 super().close()
        """
        logger.info("🔒 关闭爬虫...")
        await self.fetcher.close()
        logger.info(f"📊 爬虫统计: {self.get_statistics()}")

    async def fetch_page(self, url: str) -> str:
        """
        获取页面内容

        失败时计数并抛出，由子类决定是否继续
        """
        try:
            html = await self.fetcher.fetch_text(url)
        except Exception:
            self.stats['requests_failed'] += 1
            raise
        self.stats['pages_fetched'] += 1
        return html

    @abstractmethod
    def get_statistics(self) -> Dict[str, Any]:
        """
        获取统计信息

        子类必须实现此方法
        """
        pass
