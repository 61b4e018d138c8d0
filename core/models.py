"""
数据模型

文章集合在磁盘上使用旧版 articles.json 的字段名（image / text / content），
渲染端直接读取该文件，因此通过 alias 保持兼容。
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, List, Optional, Union, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class TextNode(BaseModel):
    """正文中的文本片段（已清理的 HTML）"""
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["html"] = "html"
    html: str = Field(alias="content")


class ImageNode(BaseModel):
    """正文中的图片"""
    type: Literal["image"] = "image"
    src: str
    caption: str = ""


ContentNode = Annotated[Union[TextNode, ImageNode], Field(discriminator="type")]


class ArticleStub(BaseModel):
    """列表页上的文章条目"""
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    link: str
    date: Optional[datetime] = None
    lead_image: Optional[str] = Field(default=None, alias="image")


class ArticleRecord(ArticleStub):
    """补全详情后的文章"""
    images: List[str] = Field(default_factory=list)
    content: List[ContentNode] = Field(default_factory=list)
    raw_body_html: Optional[str] = Field(default=None, alias="text")
    teaser: Optional[str] = None
    author: Optional[str] = None

    @property
    def is_enriched(self) -> bool:
        """raw_body_html 与 teaser 都存在即视为已处理"""
        return self.raw_body_html is not None and self.teaser is not None

    @classmethod
    def from_stub(cls, stub: ArticleStub) -> "ArticleRecord":
        return cls(title=stub.title, link=stub.link, date=stub.date, lead_image=stub.lead_image)

    def apply_details(self, details: "ArticleDetails") -> None:
        """合并详情（覆盖已有的详情字段）"""
        self.images = list(details.images)
        self.content = list(details.content)
        self.raw_body_html = details.raw_body_html
        self.teaser = details.teaser
        self.author = details.author

    def details(self) -> "ArticleDetails":
        """取出详情字段（仅对已处理的文章有意义）"""
        return ArticleDetails(
            images=self.images,
            content=self.content,
            raw_body_html=self.raw_body_html or "",
            teaser=self.teaser or "",
            author=self.author,
        )

    def date_bucket(self) -> str:
        """
        图片分组目录名（UTC 日期 YYYY-MM-DD）

        无日期的文章归入 undated
        """
        if self.date is None:
            return "undated"
        value = self.date
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()


class ArticleDetails(BaseModel):
    """详情页解析结果"""
    images: List[str] = Field(default_factory=list)
    content: List[ContentNode] = Field(default_factory=list)
    raw_body_html: str = ""
    teaser: str = ""
    author: Optional[str] = None


class ListingPage(BaseModel):
    """列表页解析结果"""
    stubs: List[ArticleStub] = Field(default_factory=list)
    next_page: Optional[str] = None


class DownloadTask(BaseModel):
    """图片下载任务（不持久化）"""
    source_url: str
    destination: Path


Collection = List[ArticleRecord]

collection_adapter = TypeAdapter(List[ArticleRecord])
