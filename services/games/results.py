from datetime import datetime, timedelta
from typing import Any, Dict

from repositories.game_results_repository import GameResultRepository


def get_results_for_day(db, user_id, day: datetime) -> Dict[str, Any]:
    """Game results recorded on ``day`` and on the day before it."""
    repo = GameResultRepository(db)
    return {
        "today": repo.get_user_results_by_day(user_id, day),
        "yesterday": repo.get_user_results_by_day(user_id, day - timedelta(days=1)),
    }
