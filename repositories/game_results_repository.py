from datetime import datetime, time, timedelta
from typing import Dict, Any, List

from pymongo import DESCENDING

from db import GAME_RESULTS, VISUOSPATIAL_RESULTS


class GameResultRepository:
    def __init__(self, db):
        self.collection = db[GAME_RESULTS]

    def save_result(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def get_user_results_by_day(self, user_id, day: datetime) -> List[Dict[str, Any]]:
        start = datetime.combine(day.date(), time.min)
        end = start + timedelta(days=1) - timedelta(milliseconds=1)
        cursor = self.collection.find({
            "userId": user_id,
            "timestamp": {"$gte": start, "$lte": end},
        }).sort("timestamp", DESCENDING)
        return list(cursor)


class VisuospatialResultRepository:
    def __init__(self, db):
        self.collection = db[VISUOSPATIAL_RESULTS]

    def save_result(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc
