import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from pymongo import DESCENDING

from db import GAME_RESULTS, VISUOSPATIAL_RESULTS, QUESTIONNAIRE_RESULTS, HEALTH_PREDICTIONS
from models.results import ALZHEIMERS_GAMES, DEMENTIA_GAMES, utcnow
from services.embeddings import generate_embedding, cosine_similarity, compute_average_embedding

logger = logging.getLogger(__name__)

RISK_WINDOW_DAYS = 30

TimeRange = Tuple[datetime, datetime]


def _has_embedding(doc: Dict[str, Any]) -> bool:
    embedding = doc.get("embedding")
    return isinstance(embedding, list) and len(embedding) > 0


def _rank(docs: List[Dict[str, Any]], target: List[float], keep: int) -> List[Dict[str, Any]]:
    ranked = [
        dict(doc, similarity=cosine_similarity(target, doc["embedding"]))
        for doc in docs if _has_embedding(doc)
    ]
    ranked.sort(key=lambda d: d["similarity"], reverse=True)
    return ranked[:keep]


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0


class RetrievalService:
    """Finds a user's stored results relevant to a query or a disease focus."""

    def __init__(self, db):
        self.db = db

    def _recent(self, collection: str, query: Dict[str, Any], limit: int) -> List[Dict[str, Any]]:
        cursor = self.db[collection].find(query).sort("timestamp", DESCENDING).limit(limit)
        return list(cursor)

    def retrieve_documents(self, user_id, query: Optional[str] = None,
                           disease_type: Optional[str] = None,
                           time_range: Optional[TimeRange] = None,
                           limit: int = 10,
                           game_types: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """
        Collect documents across the result collections.

        Args:
            user_id: Owner of the documents.
            query: Free text; when given, documents are ranked by similarity to it.
            disease_type: Restricts which collections and rows are considered.
            time_range: (start, end) bound on ``timestamp``, inclusive.
            limit: Maximum number of documents returned.
            game_types: Explicit gameType filter, overriding the disease mapping.

        Returns:
            Up to ``limit`` documents; ranked ones carry a ``similarity`` field.
        """
        query_embedding = generate_embedding(query) if query else None
        results: List[Dict[str, Any]] = []

        base: Dict[str, Any] = {"userId": user_id}
        if time_range:
            start, end = time_range
            base["timestamp"] = {"$gte": start, "$lte": end}

        if not disease_type or disease_type in ("alzheimers", "dementia"):
            game_filter = dict(base)
            if disease_type == "alzheimers":
                game_filter["gameType"] = {"$in": ALZHEIMERS_GAMES}
                game_filter["diseaseType"] = {"$in": ["alzheimers", None]}
            elif disease_type == "dementia":
                game_filter["gameType"] = {"$in": DEMENTIA_GAMES}
                game_filter["diseaseType"] = {"$in": ["dementia", "alzheimers", None]}
            if game_types is not None:
                game_filter["gameType"] = {"$in": list(game_types)}

            games = self._recent(GAME_RESULTS, game_filter, limit * 2)
            if query_embedding:
                results.extend(_rank(games, query_embedding, limit))
            else:
                embedded = [g for g in games if _has_embedding(g)]
                if embedded:
                    average = compute_average_embedding([g["embedding"] for g in embedded])
                    results.extend(_rank(embedded, average, limit))
                else:
                    results.extend(games[:limit])

            visuo_filter = dict(base)
            if disease_type == "dementia":
                visuo_filter["diseaseType"] = {"$in": ["dementia", "alzheimers", None]}
            visuospatial = self._recent(VISUOSPATIAL_RESULTS, visuo_filter, limit)
            if query_embedding:
                results.extend(_rank(visuospatial, query_embedding, limit // 2))
            else:
                results.extend([v for v in visuospatial if _has_embedding(v)][:limit // 2])

        if not disease_type or disease_type in ("stress", "depression"):
            questionnaire_filter = dict(base)
            if disease_type:
                questionnaire_filter["diseaseType"] = {"$in": [disease_type, "stress", "depression"]}
            questionnaires = self._recent(QUESTIONNAIRE_RESULTS, questionnaire_filter, limit)
            if query_embedding:
                results.extend(_rank(questionnaires, query_embedding, limit))
            else:
                results.extend([q for q in questionnaires if _has_embedding(q)][:limit])

        if not disease_type or disease_type in ("diabetes", "heart"):
            health_filter = dict(base)
            if disease_type:
                health_filter["diseaseType"] = {"$in": [disease_type, "diabetes", "heart"]}
            predictions = self._recent(HEALTH_PREDICTIONS, health_filter, limit)
            if query_embedding:
                results.extend(_rank(predictions, query_embedding, limit))
            else:
                results.extend([h for h in predictions if _has_embedding(h)][:limit])

        if not query_embedding:
            results.sort(key=lambda d: d.get("timestamp") or datetime.min, reverse=True)

        logger.debug(f"Retrieved {len(results)} documents for user {user_id} (disease={disease_type})")
        return results[:limit]

    def get_user_risk_profile(self, user_id) -> Dict[str, float]:
        """Average recent scores into per-disease risks in [0, 1]."""
        since = {"$gte": utcnow() - timedelta(days=RISK_WINDOW_DAYS)}

        alzheimers_games = self._recent(GAME_RESULTS, {
            "userId": user_id, "gameType": {"$in": ALZHEIMERS_GAMES}, "timestamp": since,
        }, 20)
        dementia_games = self._recent(GAME_RESULTS, {
            "userId": user_id, "gameType": {"$in": DEMENTIA_GAMES}, "timestamp": since,
        }, 20)
        questionnaires = self._recent(QUESTIONNAIRE_RESULTS, {
            "userId": user_id, "timestamp": since,
        }, 20)
        predictions = self._recent(HEALTH_PREDICTIONS, {
            "userId": user_id, "timestamp": since,
        }, 10)

        alzheimers = 1 - _mean([g.get("accuracy") or 0 for g in alzheimers_games]) if alzheimers_games else 0
        dementia = 1 - _mean([g.get("accuracy") or 0 for g in dementia_games]) if dementia_games else 0

        stress_scores = [(q.get("keystrokeAnalysis") or {}).get("stress_score") or 0 for q in questionnaires]
        stress = min(_mean(stress_scores), 1)
        depression = stress * 0.8

        outputs = [h.get("ml_output") or {} for h in predictions]
        diabetes = _mean([o.get("diabetes_risk") or 0 for o in outputs])
        heart = _mean([o.get("heart_disease_risk") or 0 for o in outputs])

        return {
            "alzheimers": min(alzheimers, 1),
            "dementia": min(dementia, 1),
            "stress": min(stress, 1),
            "depression": min(depression, 1),
            "diabetes": min(diabetes, 1),
            "heart": min(heart, 1),
        }
