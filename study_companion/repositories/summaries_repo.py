"""Firestore accessors for uploaded documents and their summarised notes."""

from .query_utils import list_by_user

DOCUMENTS_COLLECTION = 'doc_uploaded'
NOTES_COLLECTION = 'summarised_notes'


def create_document_doc_ref(db):
    return db.collection(DOCUMENTS_COLLECTION).document()


def document_doc_ref(db, doc_id):
    return db.collection(DOCUMENTS_COLLECTION).document(doc_id)


def get_document_doc(db, doc_id):
    return document_doc_ref(db, doc_id).get()


def delete_document_doc(db, doc_id):
    return document_doc_ref(db, doc_id).delete()


def create_note_doc_ref(db):
    return db.collection(NOTES_COLLECTION).document()


def get_note_doc(db, note_id):
    return db.collection(NOTES_COLLECTION).document(note_id).get()


def list_notes_by_user(db, user_id, limit):
    return list_by_user(db, NOTES_COLLECTION, user_id, limit, order_field='created_ts', descending=True)
