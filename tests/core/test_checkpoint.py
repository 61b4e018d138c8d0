"""
CheckpointManager 单元测试（暂存 / 提交协议）
"""
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from config import StorageConfig
from core.checkpoint import CheckpointManager
from core.exceptions import PersistenceError
from core.models import ArticleRecord
from core.storage import Storage


class TestCheckpointManager(unittest.TestCase):
    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.storage = Storage(StorageConfig(
            articles_file=self.test_dir / "articles.json",
            staging_file=self.test_dir / "articles.tmp.json",
        ))
        self.checkpoint = CheckpointManager(self.storage)
        self.committed = [ArticleRecord(link="https://x/1", title="alt")]
        self.storage.save(self.committed)

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_stage_does_not_touch_durable_file(self):
        before = self.storage.articles_file.read_bytes()
        self.checkpoint.stage([ArticleRecord(link="https://x/1", title="neu", raw_body_html="", teaser="")])
        self.assertTrue(self.checkpoint.exists())
        self.assertEqual(self.storage.articles_file.read_bytes(), before)
        self.assertEqual(self.checkpoint.stage_count, 1)

    def test_commit_promotes_staging(self):
        staged = [ArticleRecord(link="https://x/1", title="neu", raw_body_html="", teaser="")]
        self.checkpoint.stage(staged)
        self.checkpoint.commit()
        self.assertFalse(self.checkpoint.exists())
        self.assertEqual(self.storage.load(), staged)

    def test_crash_between_stage_and_rename_keeps_durable_file(self):
        """rename 失败时持久化文件保持完整且可解析"""
        self.checkpoint.stage([ArticleRecord(link="https://x/1", title="neu")])
        with patch("core.checkpoint.os.replace", side_effect=OSError("crash")):
            with self.assertRaises(PersistenceError):
                self.checkpoint.commit()
        self.assertEqual(self.storage.load(), self.committed)

    def test_commit_without_staging_raises(self):
        with self.assertRaises(PersistenceError):
            self.checkpoint.commit()

    def test_discard(self):
        before = self.storage.articles_file.read_bytes()
        self.checkpoint.stage([ArticleRecord(link="https://x/2")])
        self.checkpoint.discard()
        self.assertFalse(self.checkpoint.exists())
        self.assertEqual(self.storage.articles_file.read_bytes(), before)
        # 重复丢弃无副作用
        self.checkpoint.discard()

    def test_load_staged(self):
        self.assertIsNone(self.checkpoint.load_staged())
        staged = [ArticleRecord(link="https://x/9")]
        self.checkpoint.stage(staged)
        self.assertEqual(self.checkpoint.load_staged(), staged)

    def test_load_staged_corrupt_is_discarded(self):
        self.storage.staging_file.write_text("[{", encoding="utf-8")
        self.assertIsNone(self.checkpoint.load_staged())
        self.assertFalse(self.checkpoint.exists())

    def test_load_staged_non_utf8_is_discarded(self):
        self.storage.staging_file.write_bytes(b"\xff\xfe\x00[")
        self.assertIsNone(self.checkpoint.load_staged())
        self.assertFalse(self.checkpoint.exists())

    def test_restore_merges_enrichment_by_link(self):
        collection = [ArticleRecord(link="https://x/1", title="alt"), ArticleRecord(link="https://x/neu")]
        self.checkpoint.stage([
            ArticleRecord(link="https://x/1", title="", raw_body_html="<p>a</p>", teaser="t", images=["i.jpg"]),
            ArticleRecord(link="https://x/weg", raw_body_html="", teaser=""),
        ])
        self.assertEqual(self.checkpoint.restore(collection), 1)
        self.assertEqual([r.link for r in collection], ["https://x/1", "https://x/neu"])
        self.assertEqual(collection[0].title, "alt")
        self.assertEqual(collection[0].images, ["i.jpg"])
        self.assertTrue(collection[0].is_enriched)
        self.assertFalse(collection[1].is_enriched)

    def test_restore_without_staging(self):
        collection = [ArticleRecord(link="https://x/1")]
        self.assertEqual(self.checkpoint.restore(collection), 0)
        self.assertFalse(collection[0].is_enriched)


if __name__ == "__main__":
    unittest.main()
