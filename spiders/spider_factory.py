"""
爬虫工厂模块

提供统一的爬虫 / 下载器创建接口
"""
from typing import Dict, Optional, Type
from loguru import logger

from config import Config, config as global_config
from core.downloader import ImageDownloader
from core.fetcher import Fetcher
from parsers.base import SiteAdapter
from parsers.derstandard import DerStandardAdapter


class SpiderFactory:
    """
    爬虫工厂类

    根据 config.site.site_type 选择站点适配器，并创建：
    - 'crawl': ListingCrawler
    - 'enrich': ArticleEnricher
    以及图片下载器 ImageDownloader
    """

    _adapter_registry: Dict[str, Type[SiteAdapter]] = {
        'derstandard': DerStandardAdapter,
    }

    @classmethod
    def register(cls, site_type: str, adapter_class: Type[SiteAdapter]):
        """
        注册新的站点适配器

        Args:
            site_type: 站点类型标识
            adapter_class: 适配器类（必须继承 SiteAdapter）

        Examples:
            SpiderFactory.register('othersite', OtherSiteAdapter)
        """
        if not issubclass(adapter_class, SiteAdapter):
            raise TypeError(f"{adapter_class.__name__} 必须继承 SiteAdapter")
        cls._adapter_registry[site_type] = adapter_class
        logger.info(f"✅ 注册站点适配器: {site_type} -> {adapter_class.__name__}")

    @classmethod
    def create_adapter(cls, config: Config) -> SiteAdapter:
        """创建站点适配器"""
        site_type = config.site.site_type.lower()
        adapter_class = cls._adapter_registry.get(site_type)
        if adapter_class is None:
            available = ", ".join(cls._adapter_registry)
            raise ValueError(f"未知的站点类型: {site_type}，可用: {available}")
        return adapter_class(config.site)

    @classmethod
    def create(
        cls,
        config: Optional[Config] = None,
        spider_type: str = 'crawl',
        fetcher: Optional[Fetcher] = None,
        **kwargs
    ):
        """
        创建爬虫实例（工厂方法）

        Args:
            config: 配置对象，默认使用全局配置
            spider_type: 'crawl' 或 'enrich'
            fetcher: 可选的 Fetcher
            **kwargs: 透传给爬虫构造函数（sleep / storage / checkpoint）

        Returns:
            ListingCrawler 或 ArticleEnricher
        """
        final_config = config or global_config
        adapter = cls.create_adapter(final_config)

        if spider_type == 'crawl':
            from spiders.crawler import ListingCrawler
            spider_class = ListingCrawler
        elif spider_type == 'enrich':
            from spiders.enricher import ArticleEnricher
            spider_class = ArticleEnricher
        else:
            raise ValueError(f"未知的爬虫类型: {spider_type}")

        logger.info(f"🏭 创建爬虫: {spider_class.__name__} ({adapter.__class__.__name__})")
        return spider_class(final_config, adapter, fetcher=fetcher, **kwargs)

    @classmethod
    def create_downloader(cls, config: Optional[Config] = None, fetcher: Optional[Fetcher] = None, **kwargs) -> ImageDownloader:
        """创建图片下载器（便捷方法）"""
        final_config = config or global_config
        return ImageDownloader(
            fetcher=fetcher,
            image_config=final_config.image,
            request_config=final_config.request_config(),
            **kwargs
        )
