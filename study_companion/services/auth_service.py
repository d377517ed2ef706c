"""Credential, token and input validation helpers for the auth endpoints."""

import re

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

TOKEN_SALT = 'study-companion-auth'
EMAIL_RE = re.compile(r'^[^@\s/]+@[^@\s/]+\.[^@\s/]+$')
MIN_PASSWORD_LENGTH = 6


def normalize_email(raw_email):
    return str(raw_email or '').strip().lower()


def validate_register_input(body):
    """Return (data, error); exactly one of them is set."""
    if not isinstance(body, dict):
        return None, 'Invalid body'
    name = str(body.get('name', '') or '').strip()
    email = normalize_email(body.get('email'))
    password = body.get('password')
    if not name or not email or not password:
        return None, 'name, email, password required'
    if not EMAIL_RE.match(email):
        return None, 'email is not valid'
    if len(str(password)) < MIN_PASSWORD_LENGTH:
        return None, f'password must be at least {MIN_PASSWORD_LENGTH} characters'
    return {'name': name[:120], 'email': email, 'password': str(password)}, None


def validate_login_input(body):
    if not isinstance(body, dict):
        return None, 'Invalid body'
    email = normalize_email(body.get('email'))
    password = body.get('password')
    if not email or not password:
        return None, 'email and password required'
    return {'email': email, 'password': str(password)}, None


def hash_password(password):
    return generate_password_hash(password)


def verify_password(password_hash, password):
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def _serializer(secret_key):
    return URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)


def issue_token(secret_key, email):
    return _serializer(secret_key).dumps({'email': normalize_email(email)})


def decode_token(secret_key, token, max_age_seconds):
    """Return the token payload dict, or None when invalid or expired."""
    if not token:
        return None
    try:
        payload = _serializer(secret_key).loads(token, max_age=max_age_seconds)
    except (SignatureExpired, BadSignature):
        return None
    return payload if isinstance(payload, dict) and payload.get('email') else None


def extract_bearer_token(request):
    auth_header = request.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return ''
    return auth_header.split('Bearer ', 1)[1].strip()


def verify_request_token(request, *, secret_key, max_age_seconds, logger):
    """Return the decoded token payload for the request, or None."""
    token = extract_bearer_token(request)
    if not token:
        return None
    payload = decode_token(secret_key, token, max_age_seconds)
    if payload is None and logger is not None:
        logger.info('Token verification failed: invalid or expired token')
    return payload
