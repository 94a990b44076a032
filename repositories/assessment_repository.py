from typing import Dict, Any, List

from pymongo import ASCENDING, DESCENDING

from db import QUESTIONNAIRE_RESULTS, HEALTH_PREDICTIONS


class QuestionnaireRepository:
    def __init__(self, db):
        self.collection = db[QUESTIONNAIRE_RESULTS]

    def save_result(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc


class HealthPredictionRepository:
    def __init__(self, db):
        self.collection = db[HEALTH_PREDICTIONS]

    def save_prediction(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def list_for_user(self, user_id, limit: int = 10, newest_first: bool = True) -> List[Dict[str, Any]]:
        cursor = self.collection.find({"userId": user_id}) \
            .sort("createdAt", DESCENDING if newest_first else ASCENDING) \
            .limit(limit)
        return list(cursor)
