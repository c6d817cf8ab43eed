"""Database connection and utility functions for MongoDB.

This module owns the process-wide MongoDB client used by the registration
service. The client is created once by ``init_app`` when the application
starts and is reused by every request afterwards.
"""

from __future__ import annotations

import logging
from pymongo import MongoClient, DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from flask import current_app

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'mongo_client'


class DatabaseError(Exception):
    """Custom exception for database-related errors."""
    pass


def create_mongo_client(mongo_uri: str) -> MongoClient:
    """Create a MongoDB client instance.

    PyMongo connects lazily, so this does not touch the network.

    Returns:
        MongoClient: Configured MongoDB client instance
    """
    return MongoClient(
        mongo_uri,
        serverSelectionTimeoutMS=5000,  # 5 second timeout
        connectTimeoutMS=10000,         # 10 second connection timeout
        socketTimeoutMS=20000,          # 20 second socket timeout
        maxPoolSize=50,                 # Maximum connection pool size
        retryWrites=True
    )


def get_mongo_client(app=None) -> MongoClient:
    """Return the client registered on the application.

    Raises:
        DatabaseError: If ``init_app`` has not run for this application
    """
    app = app or current_app
    client = app.extensions.get(EXTENSION_KEY)
    if client is None:
        raise DatabaseError("MongoDB client is not initialized")
    return client


def get_db(app=None) -> Database:
    """Get database instance for the current application.

    Returns:
        Database: MongoDB database instance
    """
    app = app or current_app
    client = get_mongo_client(app)
    return client[app.config['MONGO_DB']]


def get_collection(name: str, app=None) -> Collection:
    return get_db(app)[name]


def init_app(app) -> MongoClient:
    """Create the MongoDB client once and attach it to the application.

    Calling this twice for the same app returns the existing client.

    Args:
        app: Flask application instance
    """
    existing = app.extensions.get(EXTENSION_KEY)
    if existing is not None:
        return existing

    client = create_mongo_client(app.config['MONGO_URI'])
    app.extensions[EXTENSION_KEY] = client

    # Verify connectivity during startup without blocking it
    try:
        client.admin.command('ping')
        logger.info("MongoDB connection established successfully")
    except (ConnectionFailure, ServerSelectionTimeoutError) as e:
        # Don't raise here - allow app to start even if DB is temporarily unavailable
        logger.error(f"Failed to connect to MongoDB: {e}")
    return client


def health_check() -> dict:
    """Perform database health check.

    Returns:
        dict: Health check results with status and details
    """
    try:
        client = get_mongo_client()
        client.admin.command('ping')

        return {
            'status': 'healthy',
            'database': current_app.config['MONGO_DB'],
            'message': 'Database connection is operational'
        }

    except DatabaseError as e:
        return {
            'status': 'unhealthy',
            'error': str(e),
            'message': 'Database connection failed'
        }
    except Exception as e:
        logger.error(f"Health check failed with unexpected error: {e}")
        return {
            'status': 'unhealthy',
            'error': f"Unexpected error: {str(e)}",
            'message': 'Database health check failed'
        }


def ensure_indexes() -> bool:
    """Ensure the registrations collection is indexed for listing by time.

    Returns:
        bool: True if the indexes were created/verified successfully
    """
    try:
        registrations = get_collection(current_app.config['REGISTRATIONS_COLLECTION'])
        registrations.create_index([('timestamp', DESCENDING)])
        registrations.create_index([('email', 1)])
        logger.info("Database indexes created/verified successfully")
        return True
    except Exception as e:
        logger.error(f"Failed to create indexes: {e}")
        return False
