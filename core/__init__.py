"""
核心模块

包含基础组件：
- fetcher: HTTP 请求器
- models: 数据模型
- storage: 文章集合存储
- checkpoint: 暂存 / 提交协议（断点续传）
- downloader: 图片下载器
"""
from .exceptions import SpiderError, FetchError, PersistenceError, CollectionNotFoundError
from .fetcher import Fetcher
from .storage import Storage
from .checkpoint import CheckpointManager
from .downloader import ImageDownloader

__all__ = [
    'SpiderError',
    'FetchError',
    'PersistenceError',
    'CollectionNotFoundError',
    'Fetcher',
    'Storage',
    'CheckpointManager',
    'ImageDownloader',
]
