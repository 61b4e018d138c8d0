"""
CLI模块

包含命令行接口相关功能：
- handlers: 命令处理函数
- commands: argparse 定义
"""
from cli.handlers import (
    HANDLERS,
    handle_crawl,
    handle_enrich,
    handle_download,
    handle_run,
    print_statistics,
    load_config,
)
from cli.commands import create_parser

__all__ = [
    'HANDLERS',
    'handle_crawl',
    'handle_enrich',
    'handle_download',
    'handle_run',
    'print_statistics',
    'load_config',
    'create_parser',
]
