"""
Routes package for GarageGuru
JSON API blueprints, error handlers and request authentication
"""

from garageguru.logger import get_logger

logger = get_logger("garageguru.routes")


def init_app(app):
    """Initialize all route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    from .api import api_bp
    from .api.errors import register_error_handlers
    from .api import security  # noqa: F401  registers the request loader

    register_error_handlers(app)
    app.register_blueprint(api_bp, url_prefix='/api')

    logger.info("All route blueprints registered successfully")
