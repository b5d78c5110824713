from zeitgeist.models.favorite import FavoriteRecord
from zeitgeist.models.history import AdviceHistoryRecord, MonthlyMetricRecord
from zeitgeist.models.user import UserProfileRecord
from zeitgeist.models.vibe import VibeRecord

__all__ = [
    "AdviceHistoryRecord",
    "FavoriteRecord",
    "MonthlyMetricRecord",
    "UserProfileRecord",
    "VibeRecord",
]
