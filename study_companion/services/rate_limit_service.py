"""Fixed-window limits for the auth and AI endpoints.

A Firestore counter document per key and window decides when the database is
reachable; otherwise each process keeps its own list of recent hits per key.
Both paths answer ``(allowed, retry_after_seconds)``.
"""

import hashlib

from study_companion.repositories import rate_limit_repo

COUNTER_TTL_WINDOWS = 3
# Longest window config allows; a key idle this long has no live hits.
MAX_WINDOW_SECONDS = 86400
PRUNE_THRESHOLD = 1024


def window_counter_id(key, window_seconds, window_start):
    raw = f"{key}|{window_seconds}|{int(window_start)}".encode('utf-8')
    return hashlib.sha256(raw).hexdigest()


def normalize_key_part(value, fallback='anon'):
    cleaned = ''.join(ch for ch in str(value or '').strip().lower() if ch.isalnum() or ch in '.:-_@')
    return cleaned[:120] or fallback


def window_bounds(now_ts, window_seconds):
    """Start of the window containing ``now_ts`` and the seconds until it closes."""
    window_seconds = int(window_seconds)
    start = int(now_ts // window_seconds) * window_seconds
    return start, max(1, int(start + window_seconds - now_ts))


def _count_hit(transaction, counter_ref, *, key, limit, window_start, window_seconds, retry_after, now_ts):
    snapshot = counter_ref.get(transaction=transaction)
    count = int(((snapshot.to_dict() or {}) if snapshot.exists else {}).get('count', 0) or 0)
    if count >= limit:
        return False, retry_after
    transaction.set(counter_ref, {
        'key': key,
        'count': count + 1,
        'window_start': window_start,
        'window_seconds': int(window_seconds),
        'updated_at': now_ts,
        'expires_at': window_start + window_seconds * COUNTER_TTL_WINDOWS,
    }, merge=True)
    return True, 0


def check_rate_limit_firestore(key, limit, window_seconds, now_ts, *, db, firestore_module, counter_collection, logger=None):
    """Decision from the shared counter, or None when Firestore cannot be used."""
    if db is None or firestore_module is None:
        return None
    window_start, retry_after = window_bounds(now_ts, window_seconds)
    counter_ref = rate_limit_repo.counter_doc_ref(db, counter_collection, window_counter_id(key, window_seconds, window_start))
    try:
        count_hit = firestore_module.transactional(_count_hit)
        return count_hit(
            db.transaction(),
            counter_ref,
            key=key,
            limit=limit,
            window_start=window_start,
            window_seconds=window_seconds,
            retry_after=retry_after,
            now_ts=now_ts,
        )
    except Exception as exc:
        if logger is not None:
            logger.warning(f"Rate limit counter unavailable, using in-memory window: {exc}")
        return None


def prune_idle_keys(events, now_ts, max_age=MAX_WINDOW_SECONDS):
    cutoff = now_ts - max_age
    for key in [key for key, hits in events.items() if not hits or hits[-1] < cutoff]:
        del events[key]


def check_rate_limit_memory(key, limit, window_seconds, now_ts, *, events, lock):
    with lock:
        if len(events) > PRUNE_THRESHOLD:
            prune_idle_keys(events, now_ts)
        recent = [ts for ts in events.get(key, []) if ts >= now_ts - window_seconds]
        events[key] = recent
        if len(recent) >= limit:
            return False, max(1, int(recent[0] + window_seconds - now_ts))
        recent.append(now_ts)
        return True, 0


def check_rate_limit(
    key,
    limit,
    window_seconds,
    *,
    db,
    firestore_module,
    counter_collection,
    in_memory_events,
    in_memory_lock,
    time_module,
    logger=None,
):
    now_ts = time_module.time()
    decision = check_rate_limit_firestore(
        key,
        limit,
        window_seconds,
        now_ts,
        db=db,
        firestore_module=firestore_module,
        counter_collection=counter_collection,
        logger=logger,
    )
    if decision is None:
        decision = check_rate_limit_memory(key, limit, window_seconds, now_ts, events=in_memory_events, lock=in_memory_lock)
    return decision
