"""Flask application factory and initialization."""
import logging

from flask import Flask, jsonify
from backend.app.config import get_config_class, validate_config
from backend.app.extensions import init_extensions
from backend.app import db


def create_app(config_class=None, *, store=None, mail_transport=None):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use (defaults to APP_ENV)
        store: optional registrations store used instead of MongoDB
        mail_transport: optional mail sender used instead of Flask-Mail

    Returns:
        Flask: Configured Flask application instance

    Raises:
        ConfigurationError: required credentials are missing
    """
    app = Flask(__name__)
    app.config.from_object(config_class or get_config_class())
    # Missing credentials stop startup instead of failing every request
    validate_config(app.config)

    logging.basicConfig(level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    # Initialize Flask extensions and the registration pipeline
    init_extensions(app, store=store, mail_transport=mail_transport)

    if store is None:
        # Ensure the registrations index exists (best effort)
        with app.app_context():
            if not db.ensure_indexes():
                logging.getLogger(__name__).warning('Could not ensure DB indexes at startup')

    # Register health check endpoint
    @app.route('/api/health')
    def health_check():
        """Health check endpoint with database connectivity."""
        response = {
            "status": "ok",
            "service": "registration-intake-api"
        }

        try:
            db_health = db.health_check()
            response["database"] = db_health
            if db_health.get("status") != "healthy":
                response["status"] = "degraded"
        except Exception as e:
            response["database"] = {
                "status": "unhealthy",
                "error": str(e)
            }
            response["status"] = "degraded"

        return jsonify(response)

    register_blueprints(app)

    return app


def register_blueprints(app):
    """Register Flask blueprints with the application.

    Args:
        app: Flask application instance
    """
    # Import API blueprints here to avoid circular imports
    from backend.app.blueprints.api.registrations.routes import (
        ACCEPTED_METHODS,
        registrations_bp,
        submit_registration,
    )

    app.register_blueprint(registrations_bp, url_prefix='/api/registrations')

    # Path used by the static site's form before it moved to this service
    app.add_url_rule(
        '/.netlify/functions/submitRegistration',
        endpoint='submit_registration_legacy',
        view_func=submit_registration,
        methods=ACCEPTED_METHODS,
    )
