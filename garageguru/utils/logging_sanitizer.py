"""
Logging Sanitizer Utility

Strips credentials from request payloads and headers before they are logged.
Registration and login bodies carry passwords and activation codes; every
authenticated request carries a bearer token.
"""

from typing import Any, Dict, Mapping


# Fields that should never be logged
SENSITIVE_FIELDS = {
    'password',
    'confirm_password',
    'current_password',
    'new_password',
    'pwd',
    'secret',
    'token',
    'access_token',
    'activation_code',
    'authorization',
    'api_key',
    'jwt_secret_key',
    'secret_key',
}


def sanitize_dict(data: Dict[str, Any], redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """
    Sanitize a dictionary by replacing sensitive field values with redaction text.

    Args:
        data: Dictionary to sanitize
        redact_text: Text to use for redacted values (default: '[REDACTED]')

    Returns:
        Sanitized dictionary with sensitive values replaced

    Example:
        >>> sanitize_dict({'email': 'a@b.c', 'password': 'secret123'})
        {'email': 'a@b.c', 'password': '[REDACTED]'}
    """
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        if str(key).lower() in SENSITIVE_FIELDS:
            sanitized[key] = redact_text
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, redact_text)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_dict(item, redact_text) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            sanitized[key] = value

    return sanitized


def sanitize_headers(headers: Mapping[str, str], redact_text: str = '[REDACTED]') -> Dict[str, str]:
    """Request headers with Authorization (and friends) redacted"""
    return sanitize_dict(dict(headers), redact_text)


def sanitize_exception_message(exception: Exception) -> str:
    """
    Sanitize exception messages to ensure they don't contain sensitive data.

    Args:
        exception: Exception to sanitize

    Returns:
        Sanitized exception message
    """
    message = str(exception)

    if any(field in message.lower() for field in SENSITIVE_FIELDS):
        return f"{type(exception).__name__}: [Message contains sensitive data]"

    return message
