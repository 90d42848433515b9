# shiprate/__init__.py
"""
shiprate：运费模板 / 规则表 / 绑定解析 / 运费计算 服务。
"""

__version__ = "0.3.0"
