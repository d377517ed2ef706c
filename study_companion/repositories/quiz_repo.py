"""Firestore accessors for quiz history entries."""

from .query_utils import list_by_user

QUIZ_HISTORY_COLLECTION = 'quiz_history'


def create_entry_doc_ref(db):
    return db.collection(QUIZ_HISTORY_COLLECTION).document()


def list_latest_entries_by_user(db, user_id, limit):
    """The newest ``limit`` entries, newest first."""
    return list_by_user(db, QUIZ_HISTORY_COLLECTION, user_id, limit, order_field='created_ts', descending=True)
