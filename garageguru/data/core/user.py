import enum
from garageguru import db
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from garageguru.data.tenant_base import BaseRecord


class Role(str, enum.Enum):
    GARAGE_ADMIN = 'garage_admin'
    MECHANIC_STAFF = 'mechanic_staff'
    SUPER_ADMIN = 'super_admin'


# Roles allowed through admin-only gates
ADMIN_ROLES = (Role.GARAGE_ADMIN, Role.SUPER_ADMIN)


class User(UserMixin, BaseRecord):
    __tablename__ = 'users'

    email = db.Column(db.String(254), unique=True, nullable=False)
    name = db.Column(db.Text, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(Role, name='user_role', values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
    )
    garage_id = db.Column(db.String(36), db.ForeignKey('garages.id'), nullable=True, index=True)

    garage = db.relationship('Garage', lazy='select')

    hidden_fields = ('password_hash',)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def is_super_admin(self):
        return self.role is Role.SUPER_ADMIN

    def __repr__(self):
        return f'<User {self.email} ({self.role.value})>'
