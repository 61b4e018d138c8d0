"""
数据存储模块（JSON 文件）

定位：
- 文章集合的唯一持久化形式：单个 JSON 文件（articles.json）。
- 所有写入都先写临时文件、fsync，再 os.replace，读者只会看到完整的旧版本或新版本。
- 暂存/提交协议由 CheckpointManager 负责。
"""
from typing import List, Optional
import json
import os
from pathlib import Path
from loguru import logger
from pydantic import ValidationError

from config import StorageConfig, config
from core.exceptions import CollectionNotFoundError, PersistenceError
from core.models import ArticleRecord, collection_adapter


def _serialize(collection: List[ArticleRecord]) -> str:
    """序列化为 JSON 字符串（旧版字段名）"""
    data = collection_adapter.dump_python(collection, mode="json", by_alias=True)
    return json.dumps(data, ensure_ascii=False, indent=2)


def _deserialize(text: str) -> List[ArticleRecord]:
    """从 JSON 字符串反序列化"""
    return collection_adapter.validate_json(text)


def fsync_dir(directory: Path):
    """同步目录项，确保 rename 落盘（不支持的平台忽略）"""
    try:
        fd = os.open(str(directory), os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        pass
    finally:
        os.close(fd)


def atomic_write_text(path: Path, text: str):
    """
    原子写入文本文件

    先写 <path>.part 并 fsync，再 os.replace 到目标路径。

    Raises:
        PersistenceError: 写入失败
    """
    path = Path(path)
    part = path.with_name(path.name + ".part")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(part, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(part, path)
        fsync_dir(path.parent)
    except OSError as e:
        part.unlink(missing_ok=True)
        raise PersistenceError(f"写入失败 {path}: {e}") from e


class Storage:
    """文章集合存储管理器"""

    def __init__(self, storage_config: Optional[StorageConfig] = None):
        self.config = storage_config or config.storage

    @property
    def articles_file(self) -> Path:
        return Path(self.config.articles_file)

    @property
    def staging_file(self) -> Path:
        return Path(self.config.staging_file)

    def exists(self) -> bool:
        """集合文件是否存在"""
        return self.articles_file.exists()

    def read(self, path: Path) -> List[ArticleRecord]:
        """
        读取集合文件

        Raises:
            CollectionNotFoundError: 文件不存在
            PersistenceError: 文件无法解析
        """
        path = Path(path)
        if not path.exists():
            raise CollectionNotFoundError(f"{path} not found")
        try:
            collection = _deserialize(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            raise PersistenceError(f"读取失败 {path}: {e}") from e
        logger.debug("Loaded {} articles from {}", len(collection), path)
        return collection

    def load(self) -> List[ArticleRecord]:
        """加载持久化的文章集合"""
        return self.read(self.articles_file)

    def load_or_empty(self) -> List[ArticleRecord]:
        """加载集合，不存在时返回空列表（首次爬取）"""
        if not self.exists():
            return []
        return self.load()

    def write(self, path: Path, collection: List[ArticleRecord]):
        """原子写入集合到指定路径"""
        atomic_write_text(Path(path), _serialize(collection))

    def save(self, collection: List[ArticleRecord]):
        """直接原子写入持久化文件"""
        self.write(self.articles_file, collection)
        logger.info("💾 Saved {} articles to {}", len(collection), self.articles_file)


# 全局存储实例
storage = Storage()
