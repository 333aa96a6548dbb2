from __future__ import annotations

import uuid

from django.db import IntegrityError, transaction
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from drf_spectacular.utils import extend_schema
from rest_framework.decorators import api_view, authentication_classes, permission_classes, throttle_classes
from rest_framework.exceptions import ParseError
from rest_framework.permissions import AllowAny

from apps.billing.models import WebhookLog
from apps.billing.throttles import WebhookThrottle
from apps.common.audit import get_client_ip
from apps.common.logging import get_logger
from apps.core.exceptions import TeamPayException

from .handlers import handle_yookassa_event
from .utils import extract_event_fields, idempotency_key, is_ip_allowed

logger = get_logger(__name__)


@extend_schema(exclude=True)
@csrf_exempt
@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])              # public endpoint, guarded by the IP allowlist
@throttle_classes([WebhookThrottle])
def yookassa_webhook(request):
    """
    POST /api/v1/billing/webhooks/yookassa/

    - IP outside the YooKassa ranges -> 403
    - malformed payload -> 400
    - duplicate delivery -> 200, not processed again
    - otherwise processed synchronously -> 200
    """
    trace_id = str(uuid.uuid4())[:8]
    client_ip = get_client_ip(request)
    wlog = logger.with_context(trace_id=trace_id, client_ip=client_ip)

    if not is_ip_allowed(client_ip):
        wlog.warning(
            "[WEBHOOK_BLOCKED] trace_id=%s ip=%s path=%s reason=not_in_allowlist",
            trace_id, client_ip, request.path
        )
        return JsonResponse({"error": {"code": "FORBIDDEN"}}, status=403)

    try:
        payload = request.data
    except ParseError as e:
        wlog.warning("[WEBHOOK_BAD_JSON] trace_id=%s ip=%s err=%s", trace_id, client_ip, str(e))
        return JsonResponse(
            {"error": {"code": "INVALID_JSON", "message": "Invalid JSON payload"}},
            status=400,
        )

    if not isinstance(payload, dict):
        return JsonResponse(
            {"error": {"code": "INVALID_JSON", "message": "Expected JSON object"}},
            status=400,
        )

    event_type, payment_id, _ = extract_event_fields(payload)
    key = idempotency_key(payload)
    if not key:
        wlog.warning(
            "[WEBHOOK_INVALID_PAYLOAD] trace_id=%s ip=%s event=%s payment_id=%s",
            trace_id, client_ip, event_type, payment_id
        )
        return JsonResponse(
            {"error": {"code": "INVALID_PAYLOAD", "message": "Missing required fields"}},
            status=400,
        )

    try:
        with transaction.atomic():
            log = WebhookLog.objects.create(
                event_id=key,
                event_type=event_type,
                payment_id=payment_id or "",
                client_ip=client_ip if client_ip != 'unknown' else None,
            )
    except IntegrityError:
        wlog.info("[WEBHOOK_DUPLICATE] trace_id=%s key=%s", trace_id, key)
        return JsonResponse({"status": "ok"}, status=200)

    wlog.info("[WEBHOOK_RECEIVED] trace_id=%s event=%s payment_id=%s", trace_id, event_type, payment_id)

    try:
        handled = handle_yookassa_event(event_type=event_type, payment_id=payment_id)
    except TeamPayException as e:
        # Provider unreachable: free the key and answer 500 so YooKassa retries
        WebhookLog.objects.filter(pk=log.pk).delete()
        wlog.error("[WEBHOOK_FAILED] trace_id=%s key=%s err=%s", trace_id, key, str(e))
        return JsonResponse({"error": {"code": "PROCESSING_FAILED"}}, status=500)

    WebhookLog.objects.filter(pk=log.pk).update(
        status="PROCESSED" if handled else "IGNORED",
        processed_at=timezone.now(),
    )
    wlog.info("[WEBHOOK_DONE] trace_id=%s key=%s handled=%s", trace_id, key, handled)
    return JsonResponse({"status": "ok"}, status=200)
