"""
Credential Store
Registration, login and per-request bearer-token authentication.

Tokens are stateless signed JWTs whose subject is the user id. Every request
re-resolves that id against the users table, so deleted identities stop
working immediately and no session table exists anywhere in the process.
"""

from dataclasses import dataclass
from typing import Optional
from flask import current_app
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash
from garageguru import db
from garageguru.data.core.garage import Garage
from garageguru.data.core.user import Role, User
from garageguru.data.transaction import unit_of_work
from garageguru.exceptions import (
    DuplicateIdentity,
    InvalidActivationCode,
    InvalidCredentials,
    InvalidToken,
    PayloadValidationError,
    UnknownIdentity,
)
from garageguru.logger import get_logger

logger = get_logger("garageguru.buisness.core.credential_store")

# Compared against when the email is unknown so both failure paths cost the same
_dummy_hash = None


@dataclass
class AuthResult:
    user: User
    token: str
    garage: Optional[Garage] = None

    def to_dict(self):
        return {
            'token': self.token,
            'user': self.user.to_dict(),
            'garage': self.garage.to_dict() if self.garage else None,
        }


def normalize_email(email):
    return (email or '').strip().lower()


class CredentialStore:
    """
    Issues and validates identities.

    Provides:
    - register(): activation-code gated sign-up (admins get a new garage)
    - login(): email/password check
    - authenticate(): bearer token -> User
    """

    @staticmethod
    def resolve_role(activation_code) -> Role:
        """Map an activation code to its role, or raise InvalidActivationCode"""
        role = current_app.config['ACTIVATION_CODES'].get(activation_code)
        if role is None:
            raise InvalidActivationCode()
        return Role(role)

    @staticmethod
    def register(email, password, activation_code, profile) -> AuthResult:
        """
        Create a user (and, for garage admins, the garage they own).

        Args:
            email: Login email, globally unique
            password: Plain-text password, stored only as a hash
            activation_code: Shared secret that selects the role
            profile: dict with ``name`` and, for admins, ``garage_name``,
                ``owner_name`` and ``phone``

        Returns:
            AuthResult with a fresh bearer token
        """
        role = CredentialStore.resolve_role(activation_code)
        email = normalize_email(email)

        if role is Role.GARAGE_ADMIN:
            missing = [f for f in ('garage_name', 'owner_name', 'phone') if not profile.get(f)]
            if missing:
                raise PayloadValidationError(
                    "Garage profile is incomplete",
                    errors=[{'field': f, 'message': 'required'} for f in missing],
                )

        if User.query.filter_by(email=email).first() is not None:
            raise DuplicateIdentity()

        garage = None
        with unit_of_work("register"):
            if role is Role.GARAGE_ADMIN:
                garage = Garage(
                    name=profile['garage_name'],
                    owner_name=profile['owner_name'],
                    phone=profile['phone'],
                    email=email,
                )
                db.session.add(garage)
                db.session.flush()

            user = User(
                email=email,
                name=profile.get('name') or profile.get('owner_name') or email,
                role=role,
                garage_id=garage.id if garage else None,
            )
            user.set_password(password)
            db.session.add(user)
            try:
                db.session.flush()
            except IntegrityError:
                # Concurrent registration with the same email won the race
                raise DuplicateIdentity()

        logger.info(f"Registered {role.value} user {user.id}" + (f" for garage {garage.id}" if garage else ""))
        return AuthResult(user=user, token=CredentialStore.issue_token(user), garage=garage)

    @staticmethod
    def login(email, password) -> AuthResult:
        global _dummy_hash

        user = User.query.filter_by(email=normalize_email(email)).first()
        if user is None:
            if _dummy_hash is None:
                _dummy_hash = generate_password_hash('not-a-real-password')
            check_password_hash(_dummy_hash, password or '')
            logger.warning("Failed login attempt")
            raise InvalidCredentials()

        if not user.check_password(password or ''):
            logger.warning(f"Failed login attempt for user {user.id}")
            raise InvalidCredentials()

        logger.info(f"Successful login for user {user.id}")
        return AuthResult(user=user, token=CredentialStore.issue_token(user), garage=user.garage)

    @staticmethod
    def issue_token(user) -> str:
        return create_access_token(identity=user.id)

    @staticmethod
    def authenticate(token) -> User:
        """
        Resolve a bearer token to its user.

        Raises:
            InvalidToken: malformed, expired or badly signed token
            UnknownIdentity: valid token for a user that no longer exists
        """
        try:
            claims = decode_token(token)
        except (PyJWTError, JWTExtendedException) as e:
            logger.debug(f"Rejected bearer token: {type(e).__name__}")
            raise InvalidToken() from e

        user_id = claims.get(current_app.config['JWT_IDENTITY_CLAIM'])
        user = db.session.get(User, user_id) if user_id else None
        if user is None:
            raise UnknownIdentity()
        return user

    @staticmethod
    def profile(user) -> dict:
        return {
            'user': user.to_dict(),
            'garage': user.garage.to_dict() if user.garage else None,
        }
