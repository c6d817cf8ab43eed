"""Flask extensions and service wiring (PyMongo client, Mail, registration pipeline).

Clients are created once per application in ``init_extensions`` and handed
to the registration pipeline, which routes read from ``app.extensions``.
"""
import logging
from flask_mail import Mail
from . import db
from backend.app.repositories import RegistrationsRepository
from backend.app.services.registration.notifier import RegistrationNotifier
from backend.app.services.registration.pipeline import RegistrationPipeline

logger = logging.getLogger(__name__)

# Initialize Flask extensions
mail = Mail()

PIPELINE_KEY = 'registration_pipeline'


def init_extensions(app, *, store=None, mail_transport=None):
    """Initialize Flask extensions with app context.

    Args:
        app: Flask application instance
        store: optional registrations store; defaults to the MongoDB repository
        mail_transport: optional object with ``send(message)``; defaults to Flask-Mail
    """
    if PIPELINE_KEY in app.extensions:
        return app.extensions[PIPELINE_KEY]

    mail.init_app(app)

    if store is None:
        # Initialize MongoDB connection using db module
        db.init_app(app)
        store = RegistrationsRepository.from_app(app)

    notifier = None
    if app.config.get('NOTIFICATIONS_ENABLED'):
        notifier = RegistrationNotifier.from_app(app, mail_transport or mail)
        logger.info("Staff notifications enabled for %s", app.config['NOTIFICATION_ADDRESS'])
    else:
        logger.info("Staff notifications disabled")

    pipeline = RegistrationPipeline(
        store,
        notifier,
        notification_failure_fatal=app.config.get('NOTIFICATION_FAILURE_FATAL', True),
    )
    app.extensions[PIPELINE_KEY] = pipeline
    return pipeline
