"""版本信息"""

__version__ = "0.1.0"
__author__ = "ytree"
__description__ = "基于 SQLAlchemy 的祖先路径（物化路径）树引擎"
