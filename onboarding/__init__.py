"""
Employee Onboarding Application

A five-step onboarding wizard with conditional, cross-field validation.

Enhanced with:
- CSRF protection
- Rate limiting
- Security headers
"""

import os
from datetime import datetime
from flask import Flask, request, g
from flask_sqlalchemy import SQLAlchemy

# Initialize extensions
db = SQLAlchemy()


def create_app(test_config=None):
    """Application factory pattern."""
    app = Flask(__name__, instance_relative_config=True)

    # Default configuration
    app.config.from_mapping(
        SECRET_KEY=os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production'),
        SQLALCHEMY_DATABASE_URI=os.environ.get('DATABASE_URL', 'sqlite:///onboarding.db'),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        PERMANENT_SESSION_LIFETIME=3600,  # 1 hour

        # CSRF settings
        WTF_CSRF_ENABLED=True,
        WTF_CSRF_TIME_LIMIT=3600,  # 1 hour
        WTF_CSRF_SSL_STRICT=False,  # Disabled for development
        SESSION_COOKIE_SECURE=os.environ.get('SESSION_COOKIE_SECURE', 'false').lower() == 'true',

        # Rate limiting settings
        RATELIMIT_STORAGE_URI=os.environ.get('REDIS_URL', 'memory://'),
        RATELIMIT_STRATEGY='fixed-window',
        RATELIMIT_DEFAULT='100 per minute',
        RATELIMIT_HEADERS_ENABLED=True,

        # Onboarding settings
        ONBOARDING_TIMEZONE=os.environ.get('ONBOARDING_TIMEZONE', 'UTC'),
        ONBOARDING_REFERENCE_DATE=os.environ.get('ONBOARDING_REFERENCE_DATE', ''),
        WIZARD_IDLE_TIMEOUT=int(os.environ.get('WIZARD_IDLE_TIMEOUT', 3600)),
    )

    if test_config is None:
        # Load instance config if it exists
        app.config.from_pyfile('config.py', silent=True)
    else:
        # Load test config
        app.config.from_mapping(test_config)

    # Ensure instance folder exists
    try:
        os.makedirs(app.instance_path)
    except OSError:
        pass

    # Initialize extensions with app
    db.init_app(app)

    # Import and initialize security (after db init to avoid circular imports)
    from onboarding.security import add_security_headers, init_security
    init_security(app)

    # Wizard sessions and the submission collaborator
    from onboarding.store import WizardStore
    from onboarding.submission import DatabaseSubmitter
    app.extensions['wizard_store'] = WizardStore(idle_timeout=app.config['WIZARD_IDLE_TIMEOUT'])
    app.extensions.setdefault('onboarding_submitter', DatabaseSubmitter())

    # Register blueprints
    from onboarding.routes import api_bp
    app.register_blueprint(api_bp)

    # Add security headers to all responses
    @app.after_request
    def after_request(response):
        """Add security headers to all responses."""
        return add_security_headers(response)

    # Request logging
    @app.before_request
    def before_request():
        """Log request start."""
        g.request_start_time = datetime.utcnow()

    @app.after_request
    def log_request(response):
        """Log request completion."""
        if hasattr(g, 'request_start_time'):
            duration = (datetime.utcnow() - g.request_start_time).total_seconds()
            app.logger.info(
                f'{request.method} {request.path} - {response.status_code} - {duration:.3f}s'
            )
        return response

    # Create database tables
    with app.app_context():
        from onboarding import models  # noqa: F401
        db.create_all()

    # Error handlers
    @app.errorhandler(500)
    def internal_error(error):
        """Handle internal errors."""
        db.session.rollback()
        app.logger.error(f'Internal error: {str(error)}')
        return {'ok': False, 'error': 'Internal server error'}, 500

    return app
