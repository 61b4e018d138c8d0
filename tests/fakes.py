"""
测试用假 Fetcher 与示例页面
"""
from typing import Dict, List, Union

from config import Config
from core.exceptions import FetchError

BASE = "https://www.derstandard.at"

LISTING_PAGE_1 = """
<html><body>
<section data-type="date">
  <time datetime="2024-03-01T09:00:00+01:00">1. März 2024</time>
  <article data-type="story">
    <a href="/story/1/erste"><span class="teaser-title"> Erste Geschichte </span></a>
    <img src="https://images.example.com/lead1.jpg">
  </article>
  <article data-type="story">
    <a href="/story/2/zweite"><span class="teaser-title">Zweite Geschichte</span></a>
    <img data-src="https://images.example.com/lead2.jpg">
  </article>
</section>
<div class="overview-readmore"><a href="/frontpage/2">Mehr laden</a></div>
</body></html>
"""

LISTING_PAGE_2 = """
<html><body>
<section data-type="date">
  <time datetime="2024-03-02T10:30:00Z">2. März 2024</time>
  <article data-type="story">
    <a href="https://www.derstandard.at/story/3/dritte"><span class="teaser-title">Dritte Geschichte</span></a>
  </article>
</section>
</body></html>
"""

DETAIL_PAGE = """
<html><head><meta name="description" content="Kurzfassung"></head><body>
<p class="story-lead">  Der   Lead  </p>
<div class="article-author"> Anna Autorin </div>
<div class="article-body">
<p>Erster&nbsp;  Absatz</p>
<figure><img data-fullscreen-src="https://images.example.com/a-full.jpg" src="https://images.example.com/a.jpg"><figcaption> Bild A </figcaption></figure>
<p>Zweiter <b>Absatz</b></p>
<figure><img src="https://images.example.com/b.jpg?w=300"><img data-src="https://images.example.com/c.jpg"><figcaption>BC</figcaption></figure>
<p>   </p>
</div>
</body></html>
"""


def detail_page(image_url: str, text: str = "Absatz") -> str:
    """只含一张图片的详情页"""
    return f"""
<html><head><meta name="description" content="{text}"></head><body>
<div class="article-body">
<p>{text}</p>
<figure><img src="{image_url}"><figcaption>Foto</figcaption></figure>
</div>
</body></html>
"""


class FakeFetcher:
    """
    假 Fetcher

    pages / binaries 的值可以是内容、异常，或按调用顺序依次返回的列表
    """

    def __init__(self, pages: Dict[str, object] = None, binaries: Dict[str, object] = None):
        self.pages = pages or {}
        self.binaries = binaries or {}
        self.calls: List[str] = []
        self.opened = False
        self.closed = False

    async def open(self):
        self.opened = True

    async def close(self):
        self.closed = True

    @staticmethod
    def _resolve(table: Dict[str, object], url: str) -> Union[str, bytes]:
        if url not in table:
            raise FetchError(url, 404)
        value = table[url]
        if isinstance(value, list):
            value = value.pop(0)
        if isinstance(value, BaseException):
            raise value
        return value

    async def fetch_text(self, url: str) -> str:
        self.calls.append(url)
        return self._resolve(self.pages, url)

    async def fetch_bytes(self, url: str) -> bytes:
        self.calls.append(url)
        return self._resolve(self.binaries, url)


def make_config(tmp_dir) -> Config:
    """指向临时目录的配置"""
    return Config(
        storage={
            "articles_file": f"{tmp_dir}/articles.json",
            "staging_file": f"{tmp_dir}/articles.tmp.json",
        },
        image={"download_dir": f"{tmp_dir}/images"},
        log={"log_dir": f"{tmp_dir}/logs"},
    )
