from flask import Blueprint, request

from study_companion.services import quiz_api_service

quiz_bp = Blueprint('quiz_api', __name__)


@quiz_bp.route('/api/quiz/history', methods=['GET'])
def list_history():
    from study_companion import server

    return quiz_api_service.list_history(server, request)


@quiz_bp.route('/api/quiz/history', methods=['POST'])
def add_history():
    from study_companion import server

    return quiz_api_service.add_history(server, request)
