from flask import current_app, jsonify
from flask_login import login_required
from garageguru import limiter
from garageguru.buisness.core.credential_store import CredentialStore
from garageguru.logger import get_logger
from garageguru.presentation.routes.api import api_bp
from garageguru.presentation.routes.api.security import authenticated_user
from garageguru.presentation.schemas import LoginRequest, RegisterRequest, parse_payload
from garageguru.utils.logging_sanitizer import sanitize_dict

logger = get_logger("garageguru.routes.api.auth")


def auth_rate_limit():
    return current_app.config['AUTH_RATE_LIMIT']


@api_bp.post('/auth/register')
@limiter.limit(auth_rate_limit)
def register():
    payload = parse_payload(RegisterRequest)
    logger.debug(f"Registration attempt: {sanitize_dict(payload.model_dump())}")

    profile = payload.model_dump(include={'name', 'garage_name', 'owner_name', 'phone'})
    result = CredentialStore.register(payload.email, payload.password, payload.activation_code, profile)
    return jsonify(result.to_dict()), 201


@api_bp.post('/auth/login')
@limiter.limit(auth_rate_limit)
def login():
    payload = parse_payload(LoginRequest)
    result = CredentialStore.login(payload.email, payload.password)
    return jsonify(result.to_dict())


@api_bp.get('/user/profile')
@login_required
def profile():
    return jsonify(CredentialStore.profile(authenticated_user()))
