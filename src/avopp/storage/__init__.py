"""持久化层。"""

from .sqlite_store import PlannerStore

__all__ = ["PlannerStore"]
