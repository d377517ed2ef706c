from flask import Blueprint, request

from study_companion.services import schedules_api_service

schedules_bp = Blueprint('schedules_api', __name__)


@schedules_bp.route('/api/schedules', methods=['GET'])
def get_schedule():
    from study_companion import server

    return schedules_api_service.get_schedule(server, request)


@schedules_bp.route('/api/schedules', methods=['POST'])
def save_schedule():
    from study_companion import server

    return schedules_api_service.save_schedule(server, request)
