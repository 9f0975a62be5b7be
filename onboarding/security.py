"""
Security hardening module.

Provides CSRF protection, rate limiting, security headers and input
sanitization for the onboarding API.
"""

import re
from datetime import timedelta
from typing import Any

from flask import request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_wtf.csrf import CSRFProtect


# Initialize extensions at module level
csrf = CSRFProtect()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000 per day", "200 per hour"]
)


# Security configuration defaults
DEFAULT_CONFIG = {
    'SESSION_COOKIE_SECURE': True,
    'SESSION_COOKIE_HTTPONLY': True,
    'SESSION_COOKIE_SAMESITE': 'Lax',
    'PERMANENT_SESSION_LIFETIME': timedelta(hours=1),
    'WTF_CSRF_TIME_LIMIT': 3600,  # 1 hour
    'WTF_CSRF_SSL_STRICT': True,
}


def add_security_headers(response):
    """
    Add security headers to response.
    This is a standalone function that can be used as an after_request handler.
    """
    # The API only serves JSON
    response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"

    # Prevent MIME type sniffing
    response.headers['X-Content-Type-Options'] = 'nosniff'

    # Prevent clickjacking
    response.headers['X-Frame-Options'] = 'DENY'

    # Referrer policy
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

    # Records contain personal data
    response.headers['Cache-Control'] = 'no-store'

    return response


def init_security(app):
    """Initialize security extensions with the app."""
    # Apply default security config
    for key, value in DEFAULT_CONFIG.items():
        if key not in app.config:
            app.config[key] = value

    # Initialize CSRF protection
    csrf.init_app(app)

    # Initialize rate limiter
    limiter.init_app(app)


# Rate limit configurations
RATE_LIMITS = {
    'edit': "300 per minute",
    'validate': "60 per minute",
    'navigate': "60 per minute",
    'submit': "10 per hour",
}


def rate_limit_edit():
    """Decorator for record editing endpoints."""
    return limiter.limit(RATE_LIMITS['edit'])


def rate_limit_validate():
    """Decorator for validation endpoint rate limiting."""
    return limiter.limit(RATE_LIMITS['validate'])


def rate_limit_navigate():
    """Decorator for wizard navigation endpoints."""
    return limiter.limit(RATE_LIMITS['navigate'])


def rate_limit_submit():
    """Decorator for submission endpoint rate limiting."""
    return limiter.limit(RATE_LIMITS['submit'])


# Input sanitization
HTML_TAG_PATTERN = re.compile(r'<[^>]+>')
SCRIPT_PATTERN = re.compile(r'<script[^>]*>.*?</script>', re.DOTALL | re.IGNORECASE)
# Only attributes inside a tag, including one left unclosed
EVENT_HANDLER_PATTERN = re.compile(r'(<[^>]*?)\son\w+\s*=', re.IGNORECASE)


def sanitize_string(value: str, max_length: int = 10000) -> str:
    """
    Sanitize a string value for safe storage and display.

    Args:
        value: Input string
        max_length: Maximum allowed length

    Returns:
        Sanitized string
    """
    if value is None:
        return ''

    if not isinstance(value, str):
        value = str(value)

    # Remove script tags
    value = SCRIPT_PATTERN.sub('', value)

    # Remove event handlers
    count = 1
    while count:
        value, count = EVENT_HANDLER_PATTERN.subn(r'\1 ', value)

    # Remove all HTML tags
    value = HTML_TAG_PATTERN.sub('', value)

    # Limit length
    value = value[:max_length]

    # Strip whitespace
    value = value.strip()

    return value


def sanitize_payload(payload: Any) -> Any:
    """
    Recursively sanitize all string values in a payload.

    Dictionary keys are sanitized too, since skill names arrive as keys.

    Args:
        payload: Dictionary, list or scalar to sanitize

    Returns:
        Sanitized value of the same shape
    """
    if isinstance(payload, dict):
        return {sanitize_string(k) if isinstance(k, str) else k: sanitize_payload(v)
                for k, v in payload.items()}
    elif isinstance(payload, list):
        return [sanitize_payload(item) for item in payload]
    elif isinstance(payload, str):
        return sanitize_string(payload)
    else:
        return payload


def get_client_ip() -> str:
    """Get the client IP address, handling proxies."""
    # Check for forwarded header (if behind proxy)
    forwarded_for = request.headers.get('X-Forwarded-For')
    if forwarded_for:
        # Get first IP in chain
        return forwarded_for.split(',')[0].strip()

    # Check for real IP header
    real_ip = request.headers.get('X-Real-Ip')
    if real_ip:
        return real_ip

    # Fall back to remote address
    return request.remote_addr or 'unknown'
