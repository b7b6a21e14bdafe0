#!/usr/bin/env python3
"""
Database build for GarageGuru
Creates the tables and makes sure the platform operator account exists
"""

import os
from garageguru import create_app, db
from garageguru.logger import get_logger

logger = get_logger("garageguru.build")


def build_models():
    """
    Register every model with SQLAlchemy and create missing tables.
    Existing tables are left untouched; schema changes go through Flask-Migrate.
    """
    import garageguru.data.core.garage
    import garageguru.data.core.user
    import garageguru.data.customers.customer
    import garageguru.data.inventory.spare_part
    import garageguru.data.jobs.job_card
    import garageguru.data.invoicing.invoice

    db.create_all()
    logger.info("Models built")


def ensure_super_admin():
    """
    Create the super_admin account from SUPER_ADMIN_EMAIL / SUPER_ADMIN_PASSWORD.

    Activation codes never grant super_admin, so this is the only way one comes
    into existence. Does nothing when the variables are unset or the email is
    already registered.

    Returns:
        The super_admin User, or None
    """
    from garageguru.buisness.core.credential_store import normalize_email
    from garageguru.data.core.user import Role, User
    from garageguru.data.transaction import unit_of_work

    email = normalize_email(os.environ.get('SUPER_ADMIN_EMAIL'))
    password = os.environ.get('SUPER_ADMIN_PASSWORD')
    if not email or not password:
        logger.debug("SUPER_ADMIN_EMAIL/SUPER_ADMIN_PASSWORD not set, skipping super admin")
        return None

    existing = User.query.filter_by(email=email).first()
    if existing is not None:
        if existing.role is not Role.SUPER_ADMIN:
            logger.warning(f"{email} is already registered as {existing.role.value}; not promoting")
        return existing

    user = User(email=email, name='Super Admin', role=Role.SUPER_ADMIN, garage_id=None)
    user.set_password(password)
    with unit_of_work("ensure_super_admin"):
        db.session.add(user)

    logger.info(f"Created super admin {user.id}")
    return user


def build_database(app=None, build_only=False):
    """
    Main build entry point

    Args:
        app: Flask app to build against (a new one is created when omitted)
        build_only (bool): Create tables without bootstrapping the super admin
    """
    app = app or create_app()

    with app.app_context():
        logger.info(f"Starting database build (build_only={build_only})")
        build_models()
        if not build_only:
            ensure_super_admin()
        logger.info("Database build completed successfully")
