import logging
from flask import current_app
from pymongo import MongoClient, ASCENDING, DESCENDING

import config

logger = logging.getLogger(__name__)

USERS = "users"
GAME_RESULTS = "game_results"
VISUOSPATIAL_RESULTS = "visuospatial_results"
QUESTIONNAIRE_RESULTS = "questionnaire_results"
HEALTH_PREDICTIONS = "health_predictions"

RESULT_COLLECTIONS = [GAME_RESULTS, VISUOSPATIAL_RESULTS, QUESTIONNAIRE_RESULTS, HEALTH_PREDICTIONS]


def get_db_connection(mongo_uri=None):
    mongo_uri = mongo_uri or config.MONGO_URI
    client = MongoClient(mongo_uri, serverSelectionTimeoutMS=5000)
    return client


def ensure_indexes(database):
    database[USERS].create_index([("email", ASCENDING)], unique=True)
    for name in RESULT_COLLECTIONS:
        database[name].create_index([("userId", ASCENDING), ("timestamp", DESCENDING)])
    database[GAME_RESULTS].create_index([("gameType", ASCENDING), ("timestamp", DESCENDING)])
    database[QUESTIONNAIRE_RESULTS].create_index([("sessionId", ASCENDING)])


def init_db(app, database=None):
    """Bind a database handle to the app; a ready handle can be injected."""
    if database is None:
        client = get_db_connection(app.config.get("MONGO_URI"))
        database = client[app.config.get("MONGO_DB_NAME", config.MONGO_DB_NAME)]
    app.extensions["mongo_db"] = database

    try:
        ensure_indexes(database)
    except Exception as e:
        # The server may be unreachable at boot; requests will surface the error.
        logger.warning(f"Could not create MongoDB indexes: {e}")
    return database


def get_db():
    return current_app.extensions["mongo_db"]
