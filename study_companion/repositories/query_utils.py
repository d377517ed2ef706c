"""Firestore ``where`` helper shared by the repositories.

Newer SDKs warn on positional filters, so the keyword ``FieldFilter`` form is
tried first. In-memory fakes that only take positional arguments still work.
"""

from google.cloud.firestore_v1.base_query import BaseQuery, FieldFilter


def apply_where(query, field_path, op_string, value):
    try:
        return query.where(filter=FieldFilter(field_path, op_string, value))
    except TypeError:
        return query.where(field_path, op_string, value)


def list_by_user(db, collection_name, user_id, limit=None, order_field=None, descending=False):
    """Documents owned by ``user_id``; ordering is applied before the limit.

    Ordering on top of the ``user_id`` filter needs the composite indexes in
    ``firestore.indexes.json``.
    """
    query = apply_where(db.collection(collection_name), 'user_id', '==', user_id)
    if order_field:
        query = query.order_by(order_field, direction=BaseQuery.DESCENDING if descending else BaseQuery.ASCENDING)
    if isinstance(limit, int) and limit > 0:
        query = query.limit(limit)
    return list(query.stream())
