"""
新闻归档爬虫 - 命令行入口
列表爬取 → 详情补全 → 图片下载
"""
import asyncio
import sys
from pathlib import Path
from loguru import logger

from config import LogConfig, config
from cli import HANDLERS, create_parser, load_config


def setup_logging(log_config: LogConfig):
    """配置日志：控制台 + 轮转文件"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=log_config.log_level,
        colorize=True
    )

    log_file = Path(log_config.log_dir) / log_config.log_file
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        rotation=log_config.rotation,
        retention=log_config.retention,
        encoding="utf-8",
        level="DEBUG"
    )


async def main(argv=None) -> int:
    """主函数 - 子命令模式"""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(config.log)
    cfg = load_config(args)
    if cfg is None:
        return 1
    if cfg is not config:
        setup_logging(cfg.log)

    print("\n" + "=" * 60)
    print("📰  新闻归档爬虫")
    print("=" * 60)

    return await HANDLERS[args.command](args, cfg)


def run():
    """console script 入口"""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
