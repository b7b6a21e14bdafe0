from flask import jsonify, request
from werkzeug.exceptions import HTTPException
from garageguru.exceptions import GarageGuruError, InternalError
from garageguru.logger import get_logger
from garageguru.utils.logging_sanitizer import sanitize_exception_message, sanitize_headers

logger = get_logger("garageguru.routes.api.errors")


def error_response(code, message, status_code, extra=None):
    body = {'code': code, 'message': message}
    if extra:
        body.update(extra)
    return jsonify({'error': body}), status_code


def register_error_handlers(app):
    """Map the exception taxonomy onto JSON error responses"""

    @app.errorhandler(GarageGuruError)
    def handle_core_error(error):
        if error.status_code >= 500:
            logger.error(f"{error.code}: {error.message}", exc_info=error)
        else:
            logger.info(f"{error.code}: {error.message} ({request.method} {request.path})")
        return jsonify({'error': error.to_dict()}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        code = (error.name or 'HTTP_ERROR').upper().replace(' ', '_')
        return error_response(code, error.description, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.error(
            f"Unhandled error on {request.method} {request.path}: {sanitize_exception_message(error)} "
            f"headers={sanitize_headers(request.headers)}",
            exc_info=error,
        )
        internal = InternalError()
        return error_response(internal.code, internal.message, internal.status_code)
