"""
异常定义
"""
from typing import Optional


class SpiderError(Exception):
    """爬虫异常基类"""


class FetchError(SpiderError):
    """请求失败（非 2xx 响应）"""

    def __init__(self, url: str, status: Optional[int] = None, message: Optional[str] = None):
        self.url = url
        self.status = status
        super().__init__(message or f"HTTP {status}: {url}")


class PersistenceError(SpiderError):
    """集合文件写入/读取失败，属于致命错误"""


class CollectionNotFoundError(PersistenceError):
    """集合文件不存在"""
