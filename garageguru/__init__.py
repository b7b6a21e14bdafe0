from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from datetime import timedelta
from sqlalchemy import event
import os
from garageguru.logger import get_logger

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
jwt = JWTManager()
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://"  # Use Redis in production for distributed systems
)

DEFAULT_ADMIN_ACTIVATION_CODE = 'GG-ADMIN-2025'
DEFAULT_STAFF_ACTIVATION_CODE = 'GG-STAFF-2025'


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def _enable_sqlite_transactions(engine, busy_timeout_ms):
    """
    Let SQLAlchemy own BEGIN/SAVEPOINT on pysqlite so nested transactions
    roll back correctly, and turn on foreign key enforcement.

    Transactions start with BEGIN IMMEDIATE so the write lock is taken up
    front. Concurrent requests then queue on the busy timeout instead of
    both reading and then failing to upgrade to a write lock.
    """
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_app(test_config=None):
    from pathlib import Path

    app = Flask(__name__)

    # Get singleton logger
    logger = get_logger("garageguru")
    logger.info("Initializing Flask application")

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')

    # Prefer an explicit DATABASE_URL env var; otherwise keep the SQLite
    # database inside the project's `instance/` directory.
    db_env = os.environ.get('DATABASE_URL')
    if db_env:
        app.config['SQLALCHEMY_DATABASE_URI'] = db_env
    else:
        base_dir = Path(__file__).parent.parent
        instance_dir = base_dir / 'instance'
        instance_dir.mkdir(parents=True, exist_ok=True)
        default_db_path = instance_dir / 'garageguru.db'
        app.config['SQLALCHEMY_DATABASE_URI'] = f"sqlite:///{str(default_db_path.resolve())}"

    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # How long a SQLite writer waits for another request's transaction to finish
    app.config['SQLITE_BUSY_TIMEOUT_MS'] = int(os.environ.get('SQLITE_BUSY_TIMEOUT_MS', '5000'))

    # Bearer tokens
    app.config['JWT_SECRET_KEY'] = os.environ.get('JWT_SECRET_KEY') or app.config['SECRET_KEY']
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(
        seconds=int(os.environ.get('JWT_ACCESS_TOKEN_EXPIRES', '86400'))  # Default: 24 hours
    )

    # Registration activation codes map to exactly one role each
    app.config['ACTIVATION_CODES'] = {
        os.environ.get('ADMIN_ACTIVATION_CODE', DEFAULT_ADMIN_ACTIVATION_CODE): 'garage_admin',
        os.environ.get('STAFF_ACTIVATION_CODE', DEFAULT_STAFF_ACTIVATION_CODE): 'mechanic_staff',
    }

    # Job card creation fails on unknown spare parts instead of skipping them
    app.config['JOB_CARD_STRICT_PARTS'] = _env_flag('JOB_CARD_STRICT_PARTS', 'False')

    # Rate limiting for the credential endpoints
    app.config['AUTH_RATE_LIMIT'] = os.environ.get('AUTH_RATE_LIMIT', '10 per minute')
    app.config['RATELIMIT_ENABLED'] = _env_flag('RATELIMIT_ENABLED', 'True')

    # HTTPS/TLS Configuration
    app.config['ENABLE_HTTPS'] = _env_flag('ENABLE_HTTPS', 'True')
    app.config['FORCE_HTTPS_REDIRECT'] = _env_flag('FORCE_HTTPS_REDIRECT', 'False')

    if test_config:
        app.config.update(test_config)

    # SECURITY: Require SECRET_KEY - no fallback
    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")
    if not app.config.get('JWT_SECRET_KEY'):
        app.config['JWT_SECRET_KEY'] = app.config['SECRET_KEY']

    if app.config['ENABLE_HTTPS']:
        logger.info("HTTPS enforcement enabled")
        if app.config['FORCE_HTTPS_REDIRECT']:
            logger.info("Automatic HTTP to HTTPS redirect enabled")
    else:
        logger.warning("HTTPS enforcement DISABLED - Acceptable for development only!")

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    jwt.init_app(app)
    limiter.init_app(app)

    with app.app_context():
        if db.engine.dialect.name == 'sqlite':
            _enable_sqlite_transactions(db.engine, app.config['SQLITE_BUSY_TIMEOUT_MS'])
            logger.debug("Database configured: SQLite")

    logger.debug("Extensions initialized")

    # Import models to ensure they're registered with SQLAlchemy
    from garageguru.data.core.garage import Garage
    from garageguru.data.core.user import User
    from garageguru.data.customers.customer import Customer
    from garageguru.data.inventory.spare_part import SparePart
    from garageguru.data.jobs.job_card import JobCard
    from garageguru.data.invoicing.invoice import Invoice

    logger.debug("Models imported and registered")

    # Register blueprints and error handlers
    from garageguru.presentation.routes import init_app as init_routes
    init_routes(app)

    # Add HTTPS redirect before request processing
    @app.before_request
    def enforce_https():
        """Redirect HTTP requests to HTTPS if HTTPS enforcement is enabled"""
        if app.config.get('ENABLE_HTTPS') and app.config.get('FORCE_HTTPS_REDIRECT'):
            from flask import request, redirect

            if not request.is_secure and not request.headers.get('X-Forwarded-Proto') == 'https':
                url = request.url.replace('http://', 'https://', 1)
                return redirect(url, code=308)  # keeps method and body

    # Add security headers to all responses
    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        # Tenant data must never sit in shared caches
        response.headers['Cache-Control'] = 'no-store'

        if app.config.get('ENABLE_HTTPS'):
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response

    logger.info("Flask application initialization complete")

    return app
