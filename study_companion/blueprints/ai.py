from flask import Blueprint, request

from study_companion.services import ai_api_service

ai_bp = Blueprint('ai_api', __name__)


@ai_bp.route('/api/ai/summary', methods=['POST'])
def generate_summary():
    from study_companion import server

    return ai_api_service.generate_summary(server, request)


@ai_bp.route('/api/ai/quiz', methods=['POST'])
def generate_quiz():
    from study_companion import server

    return ai_api_service.generate_quiz(server, request)


@ai_bp.route('/api/ai/answer', methods=['POST'])
def answer_question():
    from study_companion import server

    return ai_api_service.answer_question(server, request)
