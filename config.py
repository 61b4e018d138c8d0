"""
配置管理模块 - 新闻归档爬虫
统一配置管理，支持多站点预设
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
import os
import json
from pathlib import Path
from dotenv import load_dotenv
from loguru import logger

load_dotenv()

# 项目根目录
BASE_DIR = Path(__file__).parent
CONFIG_DIR = BASE_DIR / "configs"


class SiteConfig(BaseModel):
    """站点配置"""
    # 基础信息
    name: str = Field(default="default", description="配置名称")
    site_type: str = Field(default="derstandard", description="站点适配器类型")
    base_url: str = Field(default="https://www.derstandard.at", description="站点基础URL")
    start_url: str = Field(default="", description="列表页起始URL")

    # 同意墙 Cookie（缺失时服务器返回同意页面）
    consent_cookies: Dict[str, str] = Field(
        default_factory=lambda: {"DSGVO_ZUSAGE_V1": "true", "tcfs": "1"},
        description="同意 Cookie"
    )

    # 列表页选择器
    story_selector: str = Field(default='article[data-type="story"]', description="文章条目选择器")
    title_selector: str = Field(default=".teaser-title", description="标题选择器")
    link_selector: str = Field(default="a[href]", description="链接选择器")
    date_section_selector: str = Field(default='section[data-type="date"]', description="日期分组选择器")
    time_selector: str = Field(default="time[datetime]", description="时间元素选择器")
    next_page_selector: str = Field(default=".overview-readmore a[href]", description="下一页选择器")

    # 详情页选择器
    body_selector: str = Field(default=".article-body", description="正文容器选择器")
    description_selector: str = Field(default='meta[name="description"]', description="摘要 meta 选择器")
    lead_selector: str = Field(default=".story-lead", description="导语选择器")
    author_selector: str = Field(default=".article-author", description="作者选择器")


class CrawlerConfig(BaseModel):
    """爬虫配置"""
    request_timeout: int = Field(default=30, description="请求超时时间")

    # User-Agent配置
    rotate_user_agent: bool = Field(default=True, description="是否轮换UA")
    accept_language: str = Field(default="de-AT,de;q=0.9,en;q=0.8", description="Accept-Language")


class StorageConfig(BaseModel):
    """持久化配置"""
    articles_file: Path = Field(default=BASE_DIR / "articles.json", description="文章集合文件")
    staging_file: Path = Field(default=BASE_DIR / "articles.tmp.json", description="暂存文件")


class ImageConfig(BaseModel):
    """图片配置"""
    download_dir: Path = Field(default=BASE_DIR / "output" / "images", description="下载目录")
    # 文件名附加URL哈希，避免同日期不同图片的文件名冲突
    qualify_filenames: bool = Field(default=False, description="文件名附加URL哈希")


class LogConfig(BaseModel):
    """日志配置"""
    log_level: str = Field(default="INFO", description="日志级别")
    log_dir: Path = Field(default=BASE_DIR / "logs", description="日志目录")
    log_file: str = Field(default="news_spider.log", description="日志文件名")
    rotation: str = Field(default="100 MB", description="日志轮转大小")
    retention: str = Field(default="30 days", description="日志保留时间")


class RequestConfig(BaseModel):
    """注入 Fetcher 的请求配置"""
    cookies: Dict[str, str] = Field(default_factory=dict)
    headers: Dict[str, str] = Field(default_factory=dict)
    timeout: int = 30
    rotate_user_agent: bool = True

    def cookie_header(self) -> str:
        """拼接 Cookie 请求头"""
        return "; ".join(f"{k}={v}" for k, v in self.cookies.items())


class Config(BaseModel):
    """全局配置"""
    site: SiteConfig = Field(default_factory=SiteConfig)
    crawler: CrawlerConfig = Field(default_factory=CrawlerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    image: ImageConfig = Field(default_factory=ImageConfig)
    log: LogConfig = Field(default_factory=LogConfig)

    def ensure_directories(self):
        """创建必要的目录"""
        self.image.download_dir.mkdir(parents=True, exist_ok=True)
        self.storage.articles_file.parent.mkdir(parents=True, exist_ok=True)
        self.log.log_dir.mkdir(parents=True, exist_ok=True)

    def request_config(self) -> RequestConfig:
        """构建请求配置（同意 Cookie + 基础请求头）"""
        headers = {
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": self.crawler.accept_language,
        }
        if self.site.base_url:
            headers["Referer"] = self.site.base_url
        return RequestConfig(
            cookies=dict(self.site.consent_cookies),
            headers=headers,
            timeout=self.crawler.request_timeout,
            rotate_user_agent=self.crawler.rotate_user_agent,
        )


# ============================================================================
# 站点预设配置
# ============================================================================

class SitePresets:
    """站点预设"""

    @staticmethod
    def derstandard() -> Config:
        """derstandard.at 通用配置"""
        return Config(
            site={
                "name": "derStandard",
                "site_type": "derstandard",
                "base_url": "https://www.derstandard.at",
            }
        )


# ============================================================================
# 配置文件加载 - 从 configs/ 目录动态加载
# ============================================================================

def load_site_config_file(config_file: Path) -> Dict[str, Any]:
    """
    加载站点配置文件

    Args:
        config_file: 配置文件路径

    Returns:
        配置字典

    Raises:
        FileNotFoundError: 配置文件不存在
        json.JSONDecodeError: JSON格式错误
    """
    with open(config_file, 'r', encoding='utf-8') as f:
        return json.load(f)


def create_config_from_dict(data: Dict[str, Any]) -> Config:
    """
    从字典创建Config对象

    selectors 中的键对应 SiteConfig 的 *_selector 字段（不含后缀）。

    Args:
        data: 配置字典

    Returns:
        Config实例
    """
    site: Dict[str, Any] = {
        "name": data.get("name", "Unknown Site"),
        "site_type": data.get("site_type", "derstandard"),
    }
    for key in ("base_url", "start_url", "consent_cookies"):
        if data.get(key) is not None:
            site[key] = data[key]

    for key, selector in (data.get("selectors") or {}).items():
        field = f"{key}_selector"
        if field in SiteConfig.model_fields:
            site[field] = selector
        else:
            logger.warning(f"⚠️  未知选择器: {key}")

    return Config(
        site=site,
        crawler=data.get("crawler", {}),
        storage=data.get("storage", {}),
        image=data.get("image", {}),
        log=data.get("log", {}),
    )


def load_all_site_configs() -> Dict[str, Config]:
    """
    自动加载所有站点配置

    扫描 configs/ 目录下的所有 .json 文件（除了 example.json）

    Returns:
        配置字典 {配置名: Config实例}
    """
    configs = {}

    if not CONFIG_DIR.exists():
        logger.warning(f"配置目录不存在: {CONFIG_DIR}")
        return configs

    for config_file in CONFIG_DIR.glob("*.json"):
        if config_file.name in ["example.json", "template.json"]:
            continue

        name = config_file.stem
        try:
            data = load_site_config_file(config_file)
            configs[name] = create_config_from_dict(data)
            logger.debug(f"✅ 加载配置: {name} ({data.get('name', 'Unknown')})")
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️  加载配置失败: {name} - {e}")

    return configs


def get_site_config(name: str) -> Config:
    """
    获取站点配置

    Args:
        name: 配置名称（对应 configs/ 目录下的文件名，不含.json后缀）

    Returns:
        Config实例

    Raises:
        ValueError: 未知的配置名称

    Examples:
        >>> config = get_site_config("derstandard")
        >>> crawler = SpiderFactory.create(config=config)
    """
    configs = load_all_site_configs()
    if name not in configs:
        available = ", ".join(configs.keys())
        raise ValueError(f"未知的站点配置: {name}，可用: {available}")
    return configs[name]


# 从环境变量加载配置
def load_config_from_env() -> Config:
    """从环境变量加载配置"""
    config_data = {
        "site": {
            "base_url": os.getenv("NEWS_BASE_URL", "https://www.derstandard.at"),
            "start_url": os.getenv("NEWS_START_URL", ""),
            "site_type": os.getenv("NEWS_SITE_TYPE", "derstandard"),
        },
        "crawler": {
            "request_timeout": int(os.getenv("REQUEST_TIMEOUT", "30")),
            "rotate_user_agent": os.getenv("ROTATE_USER_AGENT", "true").lower() == "true",
        },
        "storage": {
            "articles_file": os.getenv("ARTICLES_FILE", str(BASE_DIR / "articles.json")),
            "staging_file": os.getenv("ARTICLES_STAGING_FILE", str(BASE_DIR / "articles.tmp.json")),
        },
        "image": {
            "download_dir": os.getenv("IMAGE_DIR", str(BASE_DIR / "output" / "images")),
            "qualify_filenames": os.getenv("QUALIFY_IMAGE_FILENAMES", "false").lower() == "true",
        },
        "log": {
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
        },
    }
    return Config(**config_data)


# 全局配置实例（默认从环境变量加载）
config = load_config_from_env()
