"""
WSGI Entry Point for Production Deployment

Exposes ``application`` for WSGI servers.

Gunicorn Configuration Example:
    gunicorn --bind 0.0.0.0:8000 --workers 4 wsgi:application

The configuration is selected by FLASK_CONFIG (development, testing, production).
"""

import logging
import os

from app import create_app

logger = logging.getLogger(__name__)

application = create_app(os.environ.get('FLASK_CONFIG'))

logger.info(f"WSGI application created ({os.environ.get('FLASK_CONFIG') or 'default'} configuration)")
