"""Firestore accessors for the users collection (keyed by normalized email)."""

USERS_COLLECTION = 'users'


def doc_ref(db, email):
    return db.collection(USERS_COLLECTION).document(email)


def get_doc(db, email):
    return doc_ref(db, email).get()


def create_doc(db, email, data):
    """Create the user document; raises ``AlreadyExists`` when the email is taken."""
    return doc_ref(db, email).create(data)
