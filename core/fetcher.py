"""
HTTP 请求模块

所有阶段共用的 GET 请求封装。请求配置（同意 Cookie、请求头、超时）由调用方注入。
"""
import aiohttp
from typing import Dict, Optional
from loguru import logger
from fake_useragent import UserAgent

from config import RequestConfig
from core.exceptions import FetchError


class Fetcher:
    """
    HTTP 请求器

    - 持有一个 aiohttp.ClientSession
    - 每个请求附带注入的 Cookie 与请求头
    - 非 200 响应抛出 FetchError，由调用方决定重试或放弃

    Example:
        async with Fetcher(config.request_config()) as fetcher:
            html = await fetcher.fetch_text(url)
    """

    def __init__(self, request_config: RequestConfig, session: Optional[aiohttp.ClientSession] = None):
        self.request_config = request_config
        self.session = session
        self._owns_session = session is None
        self.ua = UserAgent()
        self.stats = {
            "requests": 0,
            "requests_failed": 0,
        }

    async def __aenter__(self):
        """异步上下文管理器入口"""
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器出口"""
        await self.close()

    async def open(self):
        """初始化HTTP会话"""
        if self.session is None:
            timeout = aiohttp.ClientTimeout(total=self.request_config.timeout)
            self.session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True

    async def close(self):
        """关闭会话（仅关闭自己创建的会话）"""
        if self.session and self._owns_session:
            await self.session.close()
        self.session = None

    def get_headers(self, accept: Optional[str] = None) -> Dict[str, str]:
        """获取请求头"""
        headers = {
            "User-Agent": self.ua.random if self.request_config.rotate_user_agent else self.ua.chrome,
        }
        headers.update(self.request_config.headers)
        if accept:
            headers["Accept"] = accept
        cookie = self.request_config.cookie_header()
        if cookie:
            headers["Cookie"] = cookie
        return headers

    async def fetch_text(self, url: str) -> str:
        """
        获取页面内容

        Args:
            url: 页面URL

        Returns:
            HTML文本

        Raises:
            FetchError: 非 200 响应
            aiohttp.ClientError / asyncio.TimeoutError: 网络错误
        """
        logger.debug(f"📄 获取页面: {url}")
        self.stats["requests"] += 1
        async with self.session.get(url, headers=self.get_headers()) as response:
            if response.status != 200:
                self.stats["requests_failed"] += 1
                raise FetchError(url, response.status)
            return await response.text()

    async def fetch_bytes(self, url: str) -> bytes:
        """获取二进制内容（图片）"""
        logger.debug(f"🖼️  获取图片: {url}")
        self.stats["requests"] += 1
        headers = self.get_headers(accept="image/avif,image/webp,image/apng,image/*,*/*;q=0.8")
        async with self.session.get(url, headers=headers) as response:
            if response.status != 200:
                self.stats["requests_failed"] += 1
                raise FetchError(url, response.status)
            return await response.read()
