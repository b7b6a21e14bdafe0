"""
Request authentication and route guards.

Every request is authenticated from its bearer token through Flask-Login's
request loader; nothing is read from or written to a session cookie. The
guards below run the Tenant Directory checks on each call.
"""

from functools import wraps
from flask import g
from flask_login import current_user, login_required
from garageguru import login_manager
from garageguru.buisness.core.credential_store import CredentialStore
from garageguru.buisness.core.tenant_directory import TenantDirectory
from garageguru.exceptions import MissingToken
from garageguru.presentation.routes.api import api_bp


@api_bp.before_app_request
def reset_request_identity():
    # Identity comes from this request's bearer token only, never from an earlier request
    g.pop('_login_user', None)


@login_manager.request_loader
def load_user_from_request(request):
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    # InvalidToken / UnknownIdentity propagate to the API error handler
    return CredentialStore.authenticate(token.strip())


@login_manager.unauthorized_handler
def unauthorized():
    raise MissingToken()


def authenticated_user():
    return current_user._get_current_object()


def garage_access_required(view):
    """Authenticated, and the ``garage_id`` path segment is the caller's garage"""
    @wraps(view)
    def wrapper(*args, **kwargs):
        TenantDirectory.authorize_garage_access(authenticated_user(), kwargs['garage_id'])
        return view(*args, **kwargs)
    return login_required(wrapper)


def roles_required(*roles):
    """Authenticated, and the caller's role is one of ``roles``"""
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            TenantDirectory.authorize_role(authenticated_user(), roles)
            return view(*args, **kwargs)
        return login_required(wrapper)
    return decorator
