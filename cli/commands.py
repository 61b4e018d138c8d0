"""
CLI命令定义（argparse）
"""
import argparse


def create_parser() -> argparse.ArgumentParser:
    """
    创建命令行参数解析器

    Returns:
        ArgumentParser 实例
    """
    parser = argparse.ArgumentParser(
        prog='spider.py',
        description='新闻归档爬虫（列表爬取 / 详情补全 / 图片下载）',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
示例:
  # 爬取全部列表页，合并到 articles.json
  python spider.py crawl --start-url "https://www.derstandard.at/..."

  # 补全文章详情（已处理的跳过；--force 全部重新提取）
  python spider.py enrich
  python spider.py enrich --force

  # 下载图片到 output/images/<日期>/
  python spider.py download

  # 补全 + 下载
  python spider.py run --force --config derstandard
        '''
    )

    subparsers = parser.add_subparsers(dest='command', help='子命令', required=True)

    # ============================================================================
    # 子命令: crawl - 爬取列表页
    # ============================================================================
    parser_crawl = subparsers.add_parser('crawl', help='爬取全部列表页并合并到文章集合')
    parser_crawl.add_argument('--start-url', type=str, default=None,
                              help='列表页起始URL（默认取配置中的 start_url）')
    parser_crawl.add_argument('--config', type=str, help='配置文件名 (configs/ 下，如 derstandard)')

    # ============================================================================
    # 子命令: enrich - 补全详情
    # ============================================================================
    parser_enrich = subparsers.add_parser('enrich', help='抓取详情页补全文章')
    parser_enrich.add_argument('--force', action='store_true', help='重新处理已处理的文章')
    parser_enrich.add_argument('--config', type=str, help='配置文件名')

    # ============================================================================
    # 子命令: download - 下载图片
    # ============================================================================
    parser_download = subparsers.add_parser('download', help='下载文章图片')
    parser_download.add_argument('--config', type=str, help='配置文件名')

    # ============================================================================
    # 子命令: run - 补全 + 下载
    # ============================================================================
    parser_run = subparsers.add_parser('run', help='补全详情后下载图片')
    parser_run.add_argument('--force', action='store_true', help='重新处理已处理的文章')
    parser_run.add_argument('--config', type=str, help='配置文件名')

    return parser
