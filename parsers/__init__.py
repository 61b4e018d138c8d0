"""
解析器模块

包含站点适配器：
- SiteAdapter: 适配器基类
- DerStandardAdapter: derStandard 站点适配器
"""
from parsers.base import SiteAdapter, clean_text
from parsers.derstandard import DerStandardAdapter

__all__ = ['SiteAdapter', 'DerStandardAdapter', 'clean_text']
