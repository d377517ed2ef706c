from flask import Blueprint, request

from study_companion.services import summaries_api_service

summaries_bp = Blueprint('summaries_api', __name__)


@summaries_bp.route('/api/summaries', methods=['GET'])
def list_summaries():
    from study_companion import server

    return summaries_api_service.list_summaries(server, request)


@summaries_bp.route('/api/summaries', methods=['POST'])
def create_summary():
    from study_companion import server

    return summaries_api_service.create_summary(server, request)


@summaries_bp.route('/api/summaries/save', methods=['POST'])
def save_summary_artifact():
    from study_companion import server

    return summaries_api_service.save_summary_artifact(server, request)


@summaries_bp.route('/api/summaries/<note_id>/export-docx', methods=['GET'])
def export_summary_docx(note_id):
    from study_companion import server

    return summaries_api_service.export_summary_docx(server, request, note_id)
