from typing import Optional, Dict, Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument

from db import USERS
from models.results import utcnow


class UserRepository:
    def __init__(self, db):
        self.collection = db[USERS]

    @staticmethod
    def _object_id(user_id) -> Optional[ObjectId]:
        if isinstance(user_id, ObjectId):
            return user_id
        try:
            return ObjectId(str(user_id))
        except (InvalidId, TypeError):
            return None

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"email": email})

    def find_by_id(self, user_id) -> Optional[Dict[str, Any]]:
        oid = self._object_id(user_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def create_user(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = utcnow()
        doc = dict(data, createdAt=now, updatedAt=now)
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def update_profile(self, user_id, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        oid = self._object_id(user_id)
        if oid is None:
            return None
        return self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": dict(changes, updatedAt=utcnow())},
            return_document=ReturnDocument.AFTER,
        )
