"""Process-wide runtime for the REST layer.

Holds the Flask app, the Firestore and Gemini clients and the request helpers
that the service handlers receive as ``app_ctx``.
"""

import os
import json
import time
import uuid
import logging
import threading
from datetime import datetime, timezone

from flask import Flask, request, jsonify, send_file, g
from google import genai
from dotenv import load_dotenv
from werkzeug.utils import secure_filename
from werkzeug.exceptions import RequestEntityTooLarge
import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration
import firebase_admin
from firebase_admin import credentials, firestore

from study_companion.config import load_config
from study_companion.logging_config import configure_logging, log_event as _log_event
from study_companion.repositories import quiz_repo, schedules_repo, summaries_repo, users_repo
from study_companion.services import (
    auth_service,
    document_service,
    export_service,
    rate_limit_service,
)

load_dotenv()
CONFIG = load_config()
configure_logging(CONFIG.log_level)
logger = logging.getLogger('study_companion')

app = Flask(__name__)
app.secret_key = CONFIG.flask_secret_key or os.urandom(32).hex()
# Multipart framing on top of the file itself.
app.config['MAX_CONTENT_LENGTH'] = CONFIG.max_upload_bytes + (1024 * 1024)

ANONYMOUS_USER_ID = 'anonymous'
MAX_USER_ID_LEN = 160
APP_BOOT_TS = time.time()


def log_event(level, event, **fields):
    _log_event(logger, level, event, **fields)


def init_gemini_client(config):
    if not config.gemini_api_key:
        logger.info("GEMINI_API_KEY not set; AI features are disabled.")
        return None
    try:
        return genai.Client(api_key=config.gemini_api_key)
    except Exception as e:
        logger.info(f"Gemini client disabled: {e}")
        return None


def load_firebase_credentials(path='firebase-credentials.json'):
    if os.path.exists(path):
        return credentials.Certificate(path)
    raw = (os.getenv('FIREBASE_CREDENTIALS', '') or '').strip()
    if not raw:
        raise ValueError(f"FIREBASE_CREDENTIALS is not set and {path} was not found.")
    return credentials.Certificate(json.loads(raw))


def init_firestore():
    """Return (client, error); data routes answer 503 while the client is None."""
    try:
        cred = load_firebase_credentials()
        if not firebase_admin._apps:
            firebase_admin.initialize_app(cred)
        return firestore.client(), ''
    except Exception as e:
        logger.info(f"Firebase initialization skipped: {e}")
        return None, str(e)


def init_sentry(config):
    if not config.sentry_dsn:
        return False
    sentry_sdk.init(
        dsn=config.sentry_dsn,
        integrations=[FlaskIntegration()],
        send_default_pii=False,
        environment=config.sentry_environment,
        release=config.sentry_release,
    )
    return True


client = init_gemini_client(CONFIG)
db, firebase_init_error = init_firestore()
SENTRY_ENABLED = init_sentry(CONFIG)

RATE_LIMIT_EVENTS = {}
RATE_LIMIT_LOCK = threading.Lock()
RATE_LIMIT_COUNTER_COLLECTION = 'rate_limit_counters'
RATE_LIMIT_FIRESTORE_ENABLED = str(os.getenv('RATE_LIMIT_FIRESTORE_ENABLED', '1')).strip().lower() in {'1', 'true', 'yes', 'on'}


def parse_cors_allowed_origins():
    raw = (os.getenv('CORS_ALLOWED_ORIGINS', '') or '').strip()
    if raw:
        return {part.strip().lower() for part in raw.split(',') if part.strip()}
    return {
        'http://127.0.0.1:5000',
        'http://localhost:5000',
        'http://127.0.0.1:5173',
        'http://localhost:5173',
    }


CORS_ALLOWED_ORIGINS = parse_cors_allowed_origins()


# =============================================
# HELPER FUNCTIONS
# =============================================

def utc_now_iso():
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def require_db():
    return db


def resolve_user_id(req, body=None):
    """Partition key: x-user-id header, then userId query/body field, then 'anonymous'."""
    candidates = [req.headers.get('x-user-id', ''), req.args.get('userId', '')]
    if isinstance(body, dict):
        candidates.append(body.get('userId', ''))
    for candidate in candidates:
        value = str(candidate or '').strip()
        if value and '/' not in value:
            return value[:MAX_USER_ID_LEN]
    return ANONYMOUS_USER_ID


def client_address(req):
    forwarded = str(req.headers.get('X-Forwarded-For', '') or '').split(',')[0].strip()
    return rate_limit_service.normalize_key_part(forwarded or req.remote_addr or '', fallback='unknown')


def normalize_rate_limit_key_part(value, fallback='anon'):
    return rate_limit_service.normalize_key_part(value, fallback=fallback)


def verify_auth_token(req):
    return auth_service.verify_request_token(
        req,
        secret_key=app.secret_key,
        max_age_seconds=CONFIG.auth_token_max_age_seconds,
        logger=logger,
    )


def check_rate_limit(key, limit, window_seconds):
    return rate_limit_service.check_rate_limit(
        key,
        limit,
        window_seconds,
        db=db if RATE_LIMIT_FIRESTORE_ENABLED else None,
        firestore_module=firestore,
        counter_collection=RATE_LIMIT_COUNTER_COLLECTION,
        in_memory_events=RATE_LIMIT_EVENTS,
        in_memory_lock=RATE_LIMIT_LOCK,
        time_module=time,
        logger=logger,
    )


def build_rate_limited_response(message, retry_after):
    response = jsonify({'error': message, 'retry_after': int(retry_after)})
    response.status_code = 429
    response.headers['Retry-After'] = str(int(retry_after))
    return response


def apply_cors_headers(response):
    origin = str(request.headers.get('Origin', '') or '').strip()
    if not origin or not request.path.startswith('/api/'):
        return response
    if origin.lower() not in CORS_ALLOWED_ORIGINS:
        return response
    response.headers['Access-Control-Allow-Origin'] = origin
    response.headers['Vary'] = 'Origin'
    response.headers['Access-Control-Allow-Headers'] = 'Authorization, Content-Type, X-User-Id'
    response.headers['Access-Control-Allow-Methods'] = 'GET, POST, OPTIONS'
    return response


@app.before_request
def handle_api_options_preflight():
    if request.method == 'OPTIONS' and request.path.startswith('/api/'):
        return apply_cors_headers(app.make_default_options_response())


@app.before_request
def attach_request_id():
    g.request_id = str(request.headers.get('X-Request-ID', '') or '').strip()[:120] or uuid.uuid4().hex
    if sentry_sdk and SENTRY_ENABLED:
        sentry_sdk.set_tag('request.id', g.request_id)


@app.after_request
def attach_response_headers(response):
    request_id = str(getattr(g, 'request_id', '') or '').strip()
    if request_id:
        response.headers['X-Request-ID'] = request_id
    return apply_cors_headers(response)


@app.errorhandler(RequestEntityTooLarge)
def handle_request_entity_too_large(_error):
    return jsonify({'error': 'Upload too large.'}), 413


from study_companion.extensions import init_extensions  # noqa: E402

init_extensions(app)
