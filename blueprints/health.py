"""
Health Check Blueprint

Endpoints:
- /health/liveness: Application responsiveness, no database access
- /health/: Database connectivity (200 when reachable, 503 otherwise)
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, g, jsonify, request

from models import get_database_health

# Configure logging for health check operations
logger = logging.getLogger(__name__)

health_bp = Blueprint('health', __name__, url_prefix='/health')


@health_bp.route('/liveness', methods=['GET'])
def liveness_check():
    """
    Basic application responsiveness for load balancer checks.

    Returns:
        JSON response with status 'healthy'
    """
    logger.debug("Liveness check successful")
    return jsonify({
        'status': 'healthy',
        'service': current_app.name,
        'version': current_app.config.get('APP_VERSION', '1.0.0'),
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'check_type': 'liveness'
    }), 200


@health_bp.route('/', methods=['GET'])
def health_index():
    """
    Default health endpoint with database connectivity.

    HTTP Status Codes:
        200: Database reachable
        503: Database unreachable
    """
    started = time.perf_counter()
    database = get_database_health()
    is_healthy = database['status'] == 'healthy'

    response_data = {
        'status': 'healthy' if is_healthy else 'unhealthy',
        'service': current_app.name,
        'version': current_app.config.get('APP_VERSION', '1.0.0'),
        'database': database,
        'database_response_ms': round((time.perf_counter() - started) * 1000, 2),
        'endpoints': {
            'liveness': '/health/liveness',
        },
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'check_type': 'overview'
    }
    if not is_healthy:
        logger.warning(f"Health check failed: {database.get('error')}")
    return jsonify(response_data), 200 if is_healthy else 503


@health_bp.before_request
def log_health_check_request():
    g.health_check_start_time = time.time()
    logger.debug(f"Health check request: {request.method} {request.path} from {request.remote_addr}")


@health_bp.after_request
def log_health_check_response(response):
    if hasattr(g, 'health_check_start_time'):
        duration = time.time() - g.health_check_start_time
        logger.debug(f"Health check response: {request.path} -> {response.status_code} ({duration:.3f}s)")
    return response
