from flask import Blueprint, request

from study_companion.services import auth_api_service

auth_bp = Blueprint('auth_api', __name__)


@auth_bp.route('/api/auth/register', methods=['POST'])
def register():
    from study_companion import server

    return auth_api_service.register(server, request)


@auth_bp.route('/api/auth/login', methods=['POST'])
def login():
    from study_companion import server

    return auth_api_service.login(server, request)


@auth_bp.route('/api/auth/me', methods=['GET'])
def current_user():
    from study_companion import server

    return auth_api_service.current_user(server, request)
