"""核心业务逻辑：评分、排名与日程聚合。"""

from .agenda import AgendaService
from .ranking import RankingService, rank_activities
from .scoring import score_activity

__all__ = [
    "AgendaService",
    "RankingService",
    "rank_activities",
    "score_activity",
]
