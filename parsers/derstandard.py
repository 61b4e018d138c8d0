"""
derStandard 站点适配器
"""
from datetime import datetime
from typing import List, Optional, Tuple
from bs4 import BeautifulSoup, Tag
from urllib.parse import urljoin
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from parsers.base import SiteAdapter, clean_text
from core.models import ArticleStub, ContentNode, ImageNode, TextNode

_datetime_adapter = TypeAdapter(datetime)


class DerStandardAdapter(SiteAdapter):
    """
    derStandard 页面适配器

    列表页结构:
        section[data-type="date"] > time[datetime]
        section[data-type="date"] article[data-type="story"] (.teaser-title, a, img)
        .overview-readmore a   下一页

    详情页结构:
        meta[name="description"], .story-lead, .article-author
        .article-body > p / figure / div ...
    """

    # ==================== 列表页 ====================

    def parse_stubs(self, soup: BeautifulSoup, page_url: str) -> List[ArticleStub]:
        """解析列表页中的全部文章条目"""
        stubs = []
        for element in soup.select(self.config.story_selector):
            stub = self._parse_story(element, page_url)
            if stub:
                stubs.append(stub)
        return stubs

    def _parse_story(self, element: Tag, page_url: str) -> Optional[ArticleStub]:
        """解析单个文章条目"""
        link_element = element.select_one(self.config.link_selector)
        href = link_element.get('href') if link_element else None
        if not href:
            logger.debug("Story element without link skipped")
            return None

        title_element = element.select_one(self.config.title_selector)
        title = title_element.get_text().strip() if title_element else ""

        lead_image = None
        img = element.find('img')
        if img:
            lead_image = img.get('src') or img.get('data-src') or None

        return ArticleStub(
            title=title,
            link=urljoin(page_url, href),
            date=self._extract_date(element),
            lead_image=lead_image,
        )

    def _extract_date(self, element: Tag) -> Optional[datetime]:
        """从外层日期分组读取发布时间，没有分组或无法解析时返回 None"""
        section = self._closest(element, self.config.date_section_selector)
        if section is None:
            return None
        time_element = section.select_one(self.config.time_selector)
        if time_element is None:
            return None
        value = time_element.get('datetime')
        if not value:
            return None
        try:
            return _datetime_adapter.validate_python(value.strip())
        except ValidationError:
            logger.debug(f"Unparsable date: {value}")
            return None

    @staticmethod
    def _closest(element: Tag, selector: str) -> Optional[Tag]:
        """向上查找第一个匹配选择器的祖先元素"""
        for parent in element.parents:
            if isinstance(parent, Tag) and parent.name != '[document]' and parent.css.match(selector):
                return parent
        return None

    def find_next_page(self, soup: BeautifulSoup, page_url: str) -> Optional[str]:
        """查找“更多”导航链接"""
        next_element = soup.select_one(self.config.next_page_selector)
        if next_element and next_element.get('href'):
            return urljoin(page_url, next_element['href'])
        return None

    # ==================== 详情页 ====================

    def extract_teaser_and_author(self, soup: BeautifulSoup) -> Tuple[str, Optional[str]]:
        """摘要 = meta description + 导语；作者取署名元素文本"""
        meta = soup.select_one(self.config.description_selector)
        summary = (meta.get('content') or "") if meta else ""
        intro = "".join(el.get_text() for el in soup.select(self.config.lead_selector))
        teaser = clean_text("\n".join(part for part in (summary, intro) if part))

        author = "".join(el.get_text() for el in soup.select(self.config.author_selector)).strip()
        return teaser, author or None

    def walk_content(self, body: Tag) -> List[ContentNode]:
        """
        按文档顺序遍历正文的直接子元素

        - 其他元素（含直接子元素 img）：清理空白后的内部 HTML 作为 TextNode，空内容跳过
        - 其他元素：清理空白后的内部 HTML 作为 TextNode，空内容跳过（直接子元素 img 没有内部 HTML，因此不产生节点）
        """
        content: List[ContentNode] = []
        for child in body.find_all(recursive=False):
            images = child.find_all('img')
            if child.name == 'figure' or images:
                content.extend(self._image_nodes(images))
                continue

            html = clean_text(child.decode_contents())
            if html:
                content.append(TextNode(html=html))
        return content

    def _image_nodes(self, images: List[Tag]) -> List[ImageNode]:
        nodes = []
        for img in images:
            src = self.get_image_url(img)
            if not src:
                continue
            nodes.append(ImageNode(src=src, caption=self._caption(img)))
        return nodes

    @staticmethod
    def _caption(img: Tag) -> str:
        """取最近的 figure 中 figcaption 的文本"""
        figure = img.find_parent('figure')
        if figure is None:
            return ""
        return "".join(fc.get_text() for fc in figure.find_all('figcaption')).strip()
