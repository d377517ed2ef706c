"""Business logic handlers for the register/login/me endpoints."""

from google.api_core.exceptions import AlreadyExists

from study_companion.services import auth_service


def _rate_limited(app_ctx, request, action):
    client_ip = app_ctx.client_address(request)
    allowed, retry_after = app_ctx.check_rate_limit(
        key=f"auth:{action}:{client_ip}",
        limit=app_ctx.CONFIG.auth_rate_limit_max_requests,
        window_seconds=app_ctx.CONFIG.auth_rate_limit_window_seconds,
    )
    if allowed:
        return None
    return app_ctx.build_rate_limited_response('Too many attempts. Please wait and try again.', retry_after)


def public_user(user_data):
    return {
        'id': user_data.get('email', ''),
        'name': user_data.get('name', ''),
        'email': user_data.get('email', ''),
        'createdAt': user_data.get('created_at', ''),
    }


def register(app_ctx, request):
    limited = _rate_limited(app_ctx, request, 'register')
    if limited is not None:
        return limited
    data, error = auth_service.validate_register_input(request.get_json(silent=True))
    if error:
        return app_ctx.jsonify({'error': error}), 400
    db = app_ctx.require_db()
    if db is None:
        return app_ctx.jsonify({'error': 'Database unavailable'}), 503

    email = data['email']
    user_data = {
        'name': data['name'],
        'email': email,
        'password_hash': auth_service.hash_password(data['password']),
        'created_at': app_ctx.utc_now_iso(),
    }
    try:
        app_ctx.users_repo.create_doc(db, email, user_data)
    except AlreadyExists:
        return app_ctx.jsonify({'error': 'Email already registered'}), 409
    except Exception as e:
        app_ctx.logger.error(f"Error creating user {email}: {e}")
        return app_ctx.jsonify({'error': 'Failed to create user'}), 500

    app_ctx.log_event(app_ctx.logging.INFO, 'user_registered', email=email)
    return app_ctx.jsonify({'user': public_user(user_data)}), 201


def login(app_ctx, request):
    limited = _rate_limited(app_ctx, request, 'login')
    if limited is not None:
        return limited
    data, error = auth_service.validate_login_input(request.get_json(silent=True))
    if error:
        return app_ctx.jsonify({'error': error}), 400
    db = app_ctx.require_db()
    if db is None:
        return app_ctx.jsonify({'error': 'Database unavailable'}), 503

    email = data['email']
    try:
        user_doc = app_ctx.users_repo.get_doc(db, email)
    except Exception as e:
        app_ctx.logger.error(f"Error loading user {email}: {e}")
        return app_ctx.jsonify({'error': 'Could not sign in'}), 500
    if not user_doc.exists:
        return app_ctx.jsonify({'error': 'Invalid credentials'}), 401
    user_data = user_doc.to_dict() or {}
    if not auth_service.verify_password(user_data.get('password_hash', ''), data['password']):
        return app_ctx.jsonify({'error': 'Invalid credentials'}), 401

    token = auth_service.issue_token(app_ctx.app.secret_key, email)
    app_ctx.log_event(app_ctx.logging.INFO, 'user_login', email=email)
    return app_ctx.jsonify({'token': token, 'user': public_user(user_data)})


def current_user(app_ctx, request):
    payload = app_ctx.verify_auth_token(request)
    if not payload:
        return app_ctx.jsonify({'error': 'Unauthorized'}), 401
    db = app_ctx.require_db()
    if db is None:
        return app_ctx.jsonify({'user': {'email': payload['email']}})
    try:
        user_doc = app_ctx.users_repo.get_doc(db, payload['email'])
    except Exception as e:
        app_ctx.logger.error(f"Error loading user {payload['email']}: {e}")
        return app_ctx.jsonify({'error': 'Could not load user'}), 500
    if not user_doc.exists:
        return app_ctx.jsonify({'error': 'Unauthorized'}), 401
    return app_ctx.jsonify({'user': public_user(user_doc.to_dict() or {})})
