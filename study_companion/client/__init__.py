from .envelope import BareEnvelope, ErrorEnvelope, ItemEnvelope, ItemsEnvelope, decode_envelope
from .session import Session, SessionManager, SessionState
from .session_store import AuthResult, ClientSessionStore
from .storage import JsonFileStorage, MemoryStorage

__all__ = [
    'AuthResult',
    'BareEnvelope',
    'ClientSessionStore',
    'ErrorEnvelope',
    'ItemEnvelope',
    'ItemsEnvelope',
    'JsonFileStorage',
    'MemoryStorage',
    'Session',
    'SessionManager',
    'SessionState',
    'decode_envelope',
]
