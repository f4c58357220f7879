"""AVOPP：学业任务跟踪 API。"""

__version__ = "0.1.0"
