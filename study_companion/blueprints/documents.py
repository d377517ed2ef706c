from flask import Blueprint, request

from study_companion.services import documents_api_service

documents_bp = Blueprint('documents_api', __name__)


@documents_bp.route('/api/documents/extract', methods=['POST'])
def extract_document():
    from study_companion import server

    return documents_api_service.extract_document(server, request)
