"""
Health endpoints for TeamPay (load balancer and container probes).
"""

import logging
import sys

from django.core.cache import cache
from django.db import DatabaseError, connection
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)


def _check_database():
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
    except DatabaseError as e:
        logger.error("Health check: database unavailable: %s", e)
        return str(e)
    return None


def _check_cache():
    """Round-trip a key through the cache backend (Redis in production)."""
    try:
        cache.set('health_check_probe', 'ok', timeout=10)
        if cache.get('health_check_probe') != 'ok':
            return 'cache read/write failed'
    except Exception as e:  # redis-py raises its own ConnectionError family
        logger.error("Health check: cache unavailable: %s", e)
        return str(e)
    return None


@api_view(['GET'])
@permission_classes([AllowAny])
@throttle_classes([])
def health_check(request):
    """
    GET /health/

    200 when the database and the cache answer, 500 otherwise.
    """
    payload = {
        'status': 'ok',
        'version': '1.0.0',
        'python_version': '.'.join(str(v) for v in sys.version_info[:3]),
    }

    for name, check in (('database', _check_database), ('cache', _check_cache)):
        error = check()
        if error:
            payload['status'] = 'error'
            payload[name] = f'error: {error}'
            return Response(payload, status=500)
        payload[name] = 'ok'

    return Response(payload, status=200)


@api_view(['GET'])
@permission_classes([AllowAny])
@throttle_classes([])
def readiness_check(request):
    """
    GET /ready/

    503 until every dependency is reachable.
    """
    checks = {}
    for name, check in (('database', _check_database), ('cache', _check_cache)):
        error = check()
        checks[name] = f'not_ready: {error}' if error else 'ready'
        if error:
            return Response({'status': 'not_ready', 'checks': checks}, status=503)

    return Response({'status': 'ready', 'checks': checks}, status=200)


@api_view(['GET'])
@permission_classes([AllowAny])
@throttle_classes([])
def liveness_check(request):
    """GET /live/"""
    return Response({'status': 'alive'}, status=200)
