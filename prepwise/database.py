# prepwise/database.py
import logging

from flask import current_app
from pymongo import ASCENDING, DESCENDING, MongoClient, monitoring

logger = logging.getLogger(__name__)

# COLLECTIONS
TEACHERS = "teachers"
STUDENTS = "students"
NOTES = "notes"
QUIZZES = "quizzes"
SUBMISSIONS = "submissions"
QUIZ_ATTEMPTS = "quiz_attempts"


def log_state_change(state, address):
    if state == "disconnected":
        logger.warning(f"MongoDB disconnected from {address}. Waiting for reconnect...")
    else:
        logger.info(f"MongoDB {state}: {address}")


class ConnectionStateListener(monitoring.ServerListener):
    """Turns pymongo server description changes into connectivity states."""

    def __init__(self, on_state_change):
        self.on_state_change = on_state_change
        self._seen = set()

    def opened(self, event):
        pass

    def description_changed(self, event):
        was_known = event.previous_description.is_server_type_known
        is_known = event.new_description.is_server_type_known
        address = "%s:%s" % event.server_address

        if is_known and not was_known:
            state = "reconnected" if address in self._seen else "connected"
            self._seen.add(address)
            self.on_state_change(state, address)
        elif was_known and not is_known:
            self.on_state_change("disconnected", address)

    def closed(self, event):
        pass


class Database:
    """
    Owns the MongoClient for the lifetime of the app.

    `client_factory` is called as factory(uri, **options) and defaults to
    pymongo's MongoClient; tests pass a mongomock client instead.
    """

    def __init__(self, uri, name, client_factory=MongoClient, on_state_change=log_state_change):
        self.uri = uri
        self.name = name
        self.client_factory = client_factory
        self.on_state_change = on_state_change
        self.client = None
        self.db = None

    def connect(self):
        if self.client is not None:
            return self

        self.client = self.client_factory(
            self.uri,
            serverSelectionTimeoutMS=5000,
            event_listeners=[ConnectionStateListener(self.on_state_change)],
        )
        self.client.admin.command("ping")
        self.db = self.client[self.name]
        self.ensure_indexes()
        logger.info(f"MongoDB connected: database '{self.name}'")
        return self

    def close(self):
        if self.client is None:
            return
        self.client.close()
        self.client = None
        self.db = None
        self.on_state_change("closed", self.name)

    def __getitem__(self, collection):
        if self.db is None:
            raise RuntimeError("Database is not connected")
        return self.db[collection]

    def ensure_indexes(self):
        self[TEACHERS].create_index("email", unique=True)
        self[TEACHERS].create_index("employeeId", unique=True)

        self[STUDENTS].create_index("email", unique=True)
        self[STUDENTS].create_index("rollNo", unique=True)
        self[STUDENTS].create_index([("section", ASCENDING), ("rollNo", ASCENDING)])

        self[NOTES].create_index([
            ("regulation", ASCENDING), ("year", ASCENDING),
            ("semester", ASCENDING), ("subject", ASCENDING),
        ])
        self[NOTES].create_index([("uploadedBy", ASCENDING), ("subject", ASCENDING)])
        self[NOTES].create_index([("createdAt", DESCENDING)])

        self[QUIZZES].create_index([
            ("regulation", ASCENDING), ("year", ASCENDING), ("semester", ASCENDING),
        ])
        self[QUIZZES].create_index("createdBy")
        self[QUIZZES].create_index([("subject", ASCENDING), ("unit", ASCENDING)])

        # ✅ one submission per (quiz, student), enforced by the server
        self[SUBMISSIONS].create_index(
            [("quiz", ASCENDING), ("student", ASCENDING)], unique=True
        )

        self[QUIZ_ATTEMPTS].create_index(
            [("student", ASCENDING), ("quiz", ASCENDING)], unique=True
        )
        self[QUIZ_ATTEMPTS].create_index([("student", ASCENDING), ("submittedAt", DESCENDING)])
        self[QUIZ_ATTEMPTS].create_index([("student", ASCENDING), ("subject", ASCENDING)])
        self[QUIZ_ATTEMPTS].create_index([("student", ASCENDING), ("unit", ASCENDING)])
        self[QUIZ_ATTEMPTS].create_index([("subject", ASCENDING), ("unit", ASCENDING)])
        self[QUIZ_ATTEMPTS].create_index("quiz")


def get_db():
    return current_app.extensions["mongo"]


def populate(docs, field, collection, projection=None):
    """
    Replace docs[i][field] (an ObjectId) with the referenced document.
    References that no longer resolve are left as the raw id.
    """
    ids = {doc[field] for doc in docs if doc.get(field) is not None}
    if not ids:
        return docs

    if projection is not None:
        projection = {key: 1 for key in projection}

    found = {
        ref["_id"]: ref
        for ref in get_db()[collection].find({"_id": {"$in": list(ids)}}, projection)
    }
    for doc in docs:
        if doc.get(field) in found:
            doc[field] = found[doc[field]]
    return docs
