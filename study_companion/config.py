import os
from dataclasses import dataclass, field


DEV_ENV_NAMES = {'development', 'dev', 'local', 'test'}


def _env(name, default=''):
    return (os.getenv(name, default) or default).strip()


def safe_int_env(name, default=0, minimum=1, maximum=100000):
    raw = os.getenv(name, str(default)).strip()
    try:
        value = int(raw)
    except Exception:
        value = int(default)
    return min(max(value, minimum), maximum)


@dataclass(frozen=True)
class AppConfig:
    """Central server config, read from the environment at construction time."""

    flask_secret_key: str = field(default_factory=lambda: _env('FLASK_SECRET_KEY'))
    log_level: str = field(default_factory=lambda: _env('LOG_LEVEL', 'INFO').upper())
    sentry_dsn: str = field(default_factory=lambda: _env('SENTRY_DSN_BACKEND'))
    sentry_environment: str = field(default_factory=lambda: _env('SENTRY_ENVIRONMENT', _env('FLASK_ENV', 'production')))
    sentry_release: str = field(default_factory=lambda: _env('SENTRY_RELEASE', 'study-companion'))
    gemini_api_key: str = field(default_factory=lambda: _env('GEMINI_API_KEY'))
    gemini_model: str = field(default_factory=lambda: _env('GEMINI_MODEL', 'gemini-2.5-flash'))
    auth_token_max_age_seconds: int = field(default_factory=lambda: safe_int_env('AUTH_TOKEN_MAX_AGE_SECONDS', 7 * 24 * 3600, minimum=60, maximum=90 * 24 * 3600))
    max_upload_bytes: int = field(default_factory=lambda: safe_int_env('MAX_UPLOAD_BYTES', 25 * 1024 * 1024, minimum=1024, maximum=200 * 1024 * 1024))
    auth_rate_limit_window_seconds: int = field(default_factory=lambda: safe_int_env('AUTH_RATE_LIMIT_WINDOW_SECONDS', 300, minimum=10, maximum=86400))
    auth_rate_limit_max_requests: int = field(default_factory=lambda: safe_int_env('AUTH_RATE_LIMIT_MAX_REQUESTS', 20, minimum=1, maximum=1000))
    ai_rate_limit_window_seconds: int = field(default_factory=lambda: safe_int_env('AI_RATE_LIMIT_WINDOW_SECONDS', 600, minimum=10, maximum=86400))
    ai_rate_limit_max_requests: int = field(default_factory=lambda: safe_int_env('AI_RATE_LIMIT_MAX_REQUESTS', 30, minimum=1, maximum=1000))

    @property
    def is_dev_like(self):
        return runtime_environment() in DEV_ENV_NAMES


@dataclass(frozen=True)
class ClientConfig:
    """Settings for the Python client that talks to the REST layer."""

    api_url: str = field(default_factory=lambda: _env('STUDY_COMPANION_API_URL', 'http://localhost:5000/api').rstrip('/'))
    session_file: str = field(default_factory=lambda: _env(
        'STUDY_COMPANION_SESSION_FILE',
        os.path.join(os.path.expanduser('~'), '.study_companion', 'session.json'),
    ))
    http_timeout: float = field(default_factory=lambda: _parse_timeout(os.getenv('STUDY_COMPANION_HTTP_TIMEOUT', '')))


def _parse_timeout(raw):
    raw = str(raw or '').strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def runtime_environment():
    return (
        os.getenv('SENTRY_ENVIRONMENT')
        or os.getenv('FLASK_ENV')
        or os.getenv('ENV')
        or ('production' if os.getenv('RENDER') else 'development')
    ).strip().lower()


def load_config() -> AppConfig:
    config = AppConfig()
    if not config.is_dev_like and not config.flask_secret_key:
        raise RuntimeError('FLASK_SECRET_KEY must be set in non-development environments.')
    return config


def load_client_config() -> ClientConfig:
    return ClientConfig()
