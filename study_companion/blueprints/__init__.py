from .auth import auth_bp
from .summaries import summaries_bp
from .schedules import schedules_bp
from .quiz import quiz_bp
from .ai import ai_bp
from .documents import documents_bp
from .system import system_bp

ALL_BLUEPRINTS = [auth_bp, summaries_bp, schedules_bp, quiz_bp, ai_bp, documents_bp, system_bp]

__all__ = ['auth_bp', 'summaries_bp', 'schedules_bp', 'quiz_bp', 'ai_bp', 'documents_bp', 'system_bp', 'ALL_BLUEPRINTS']
