"""
CLI 参数解析单元测试
"""
import unittest

from cli.commands import create_parser


class TestCreateParser(unittest.TestCase):
    def setUp(self):
        self.parser = create_parser()

    def test_crawl(self):
        args = self.parser.parse_args(["crawl", "--start-url", "https://www.derstandard.at/frontpage"])
        self.assertEqual(args.command, "crawl")
        self.assertEqual(args.start_url, "https://www.derstandard.at/frontpage")
        self.assertIsNone(args.config)

    def test_crawl_without_start_url(self):
        args = self.parser.parse_args(["crawl", "--config", "derstandard"])
        self.assertIsNone(args.start_url)
        self.assertEqual(args.config, "derstandard")

    def test_enrich_force(self):
        self.assertFalse(self.parser.parse_args(["enrich"]).force)
        self.assertTrue(self.parser.parse_args(["enrich", "--force"]).force)

    def test_download(self):
        self.assertEqual(self.parser.parse_args(["download"]).command, "download")

    def test_run(self):
        args = self.parser.parse_args(["run", "--force"])
        self.assertEqual(args.command, "run")
        self.assertTrue(args.force)

    def test_subcommand_required(self):
        with self.assertRaises(SystemExit):
            self.parser.parse_args([])

    def test_unknown_subcommand(self):
        with self.assertRaises(SystemExit):
            self.parser.parse_args(["crawl-bbs"])


if __name__ == "__main__":
    unittest.main()
