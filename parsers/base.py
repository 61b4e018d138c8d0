"""
站点适配器基类模块

包含站点适配器的抽象基类：
- SiteAdapter: 列表页 / 详情页解析的稳定接口

爬取、补全、下载流程只依赖 SiteAdapter 的四个抽象操作，
更换站点时只需实现新的适配器。
"""
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from bs4 import BeautifulSoup, Tag
from loguru import logger

from config import SiteConfig
from core.models import ArticleDetails, ArticleStub, ContentNode, ListingPage

_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    """合并连续空白（含不换行空格）并去除首尾空白"""
    return _WHITESPACE_RE.sub(" ", text.replace("\u00a0", " ")).strip()


class SiteAdapter(ABC):
    """
    站点适配器基类

    子类需要实现:
    - parse_stubs(): 列表页文章条目
    - find_next_page(): 下一页链接
    - walk_content(): 正文子元素 -> 有序内容节点
    - extract_teaser_and_author(): 摘要与作者

    基类提供:
    - parse_listing(): 列表页解析入口
    - parse_article(): 详情页解析入口
    - 图片地址提取与去重
    """

    # 图片地址属性优先级：原图 > src > 懒加载
    image_attributes: Tuple[str, ...] = ("data-fullscreen-src", "src", "data-src")

    def __init__(self, site_config: SiteConfig):
        """
        初始化适配器

        Args:
            site_config: 站点配置（选择器等）
        """
        self.config = site_config

    @staticmethod
    def make_soup(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, 'lxml')

    # ==================== 抽象操作 ====================

    @abstractmethod
    def parse_stubs(self, soup: BeautifulSoup, page_url: str) -> List[ArticleStub]:
        """提取列表页中的文章条目（链接必须是绝对URL）"""

    @abstractmethod
    def find_next_page(self, soup: BeautifulSoup, page_url: str) -> Optional[str]:
        """提取下一页链接，没有则返回 None"""

    @abstractmethod
    def walk_content(self, body: Tag) -> List[ContentNode]:
        """按文档顺序遍历正文，生成内容节点"""

    @abstractmethod
    def extract_teaser_and_author(self, soup: BeautifulSoup) -> Tuple[str, Optional[str]]:
        """提取摘要与作者"""

    # ==================== 解析入口 ====================

    def find_body(self, soup: BeautifulSoup) -> Optional[Tag]:
        """定位正文容器"""
        return soup.select_one(self.config.body_selector)

    def parse_listing(self, html: str, page_url: str) -> ListingPage:
        """
        解析列表页

        Args:
            html: HTML内容
            page_url: 当前页URL（用于处理相对链接）

        Returns:
            ListingPage(stubs, next_page)
        """
        soup = self.make_soup(html)
        stubs = self.parse_stubs(soup, page_url)
        next_page = self.find_next_page(soup, page_url)
        logger.debug(f"Parsed {len(stubs)} stubs, next page: {next_page}")
        return ListingPage(stubs=stubs, next_page=next_page)

    def parse_article(self, html: str) -> ArticleDetails:
        """
        解析详情页

        正文容器缺失时返回空的 images / content / raw_body_html，不抛异常。

        Args:
            html: HTML内容

        Returns:
            ArticleDetails
        """
        soup = self.make_soup(html)
        teaser, author = self.extract_teaser_and_author(soup)

        body = self.find_body(soup)
        if body is None:
            logger.warning("⚠️  未找到正文容器: {}", self.config.body_selector)
            return ArticleDetails(teaser=teaser, author=author)

        return ArticleDetails(
            images=self.collect_images(body),
            content=self.walk_content(body),
            raw_body_html=body.decode_contents(),
            teaser=teaser,
            author=author,
        )

    # ==================== 图片工具 ====================

    def get_image_url(self, img_tag: Tag) -> Optional[str]:
        """
        从img标签获取图片URL

        按 image_attributes 的优先级取第一个非空属性

        Args:
            img_tag: BeautifulSoup img标签

        Returns:
            图片URL，如果无法获取返回None
        """
        for attr in self.image_attributes:
            value = img_tag.get(attr)
            if value:
                return value
        return None

    def collect_images(self, body: Tag) -> List[str]:
        """
        收集正文中全部图片URL

        Returns:
            图片URL列表（按首次出现顺序去重）
        """
        images = []
        for img in body.find_all('img'):
            src = self.get_image_url(img)
            if src and src not in images:
                images.append(src)
        return images
