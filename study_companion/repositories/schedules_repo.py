"""Firestore accessors for study schedules (one document per user)."""

SCHEDULES_COLLECTION = 'schedules'


def schedule_doc_ref(db, user_id):
    return db.collection(SCHEDULES_COLLECTION).document(user_id)


def get_schedule_doc(db, user_id):
    return schedule_doc_ref(db, user_id).get()


def set_schedule_doc(db, user_id, payload):
    return schedule_doc_ref(db, user_id).set(payload)
