"""
Views for plans, team subscriptions and invoices.

Every team endpoint checks, in order: authentication, suspension, the
token scope (401 when missing) and the team-admin policy (403).
"""

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from apps.teams.policies import authorize
from apps.teams.services import get_team_or_404
from apps.users.permissions import NotSuspended, require_scope

from . import services
from .serializers import (
    InvoiceDetailSerializer,
    InvoiceSerializer,
    SubscribeSerializer,
    SubscriptionPlanSerializer,
    SubscriptionSerializer,
)
from .throttles import SubscriptionChangeThrottle

logger = logging.getLogger(__name__)


def _billable_team(request, slug, scope):
    require_scope(request, scope)
    team = get_team_or_404(slug)
    authorize(request, team, 'manage-billing')
    return team


@extend_schema(
    tags=['Billing'],
    responses={200: SubscriptionPlanSerializer(many=True)},
)
@api_view(['GET'])
@permission_classes([AllowAny])
def get_subscription_plans(request):
    """
    GET /api/v1/billing/plans/
    Active plans (public).
    """
    plans = services.get_active_plans()
    return Response(SubscriptionPlanSerializer(plans, many=True).data)


@extend_schema(
    tags=['Billing'],
    summary="Subscribe the team to a plan",
    description="""
    - free plan: cancels the paid subscription (grace period until the end of the paid period)
    - subscribed team: swaps the plan, charging the saved payment method
    - otherwise: creates a subscription charged with `nonce` (YooKassa payment_token)

    A `pending` subscription, or a swap waiting for 3-D Secure (`pending_plan` set),
    carries `confirmation_url`.
    """,
    request=SubscribeSerializer,
    responses={
        200: SubscriptionSerializer,
        401: OpenApiResponse(description="Missing manage-subscriptions scope"),
        403: OpenApiResponse(description="Not a team admin / account suspended"),
        409: OpenApiResponse(description="A previous payment is still being confirmed"),
        422: OpenApiResponse(description="Unavailable plan, invalid coupon or missing nonce"),
        502: OpenApiResponse(description="Payment provider declined or failed"),
    },
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, NotSuspended])
@throttle_classes([SubscriptionChangeThrottle])
def subscribe(request, slug):
    """
    POST /api/v1/teams/{slug}/subscription/
    """
    team = _billable_team(request, slug, 'manage-subscriptions')

    serializer = SubscribeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    change = services.subscribe_team(
        team=team,
        plan=serializer.validated_data['plan'],
        nonce=serializer.validated_data.get('nonce') or None,
        coupon=serializer.validated_data.get('coupon'),
    )

    if change.action == services.ACTION_CANCELLED:
        return Response({"message": "Paid subscription cancelled"}, status=status.HTTP_200_OK)

    if change.subscription is None:
        return Response({"message": "The team is on the free plan."}, status=status.HTTP_200_OK)

    data = SubscriptionSerializer(change.subscription).data
    if change.confirmation_url:
        data['confirmation_url'] = change.confirmation_url
    return Response(data, status=status.HTTP_200_OK)


@extend_schema(
    tags=['Billing'],
    request=None,
    responses={
        200: SubscriptionSerializer,
        404: OpenApiResponse(description="Team has no subscription"),
        409: OpenApiResponse(description="Already cancelled"),
    },
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, NotSuspended])
@throttle_classes([SubscriptionChangeThrottle])
def cancel_subscription(request, slug):
    """
    POST /api/v1/teams/{slug}/subscription/cancel/
    """
    team = _billable_team(request, slug, 'manage-subscriptions')
    subscription = services.cancel_subscription(team)
    return Response(SubscriptionSerializer(subscription).data)


@extend_schema(
    tags=['Billing'],
    request=None,
    responses={
        200: SubscriptionSerializer,
        404: OpenApiResponse(description="Team has no subscription"),
        409: OpenApiResponse(description="Not on grace period"),
    },
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, NotSuspended])
@throttle_classes([SubscriptionChangeThrottle])
def resume_subscription(request, slug):
    """
    POST /api/v1/teams/{slug}/subscription/resume/
    """
    team = _billable_team(request, slug, 'manage-subscriptions')
    subscription = services.resume_subscription(team)
    return Response(SubscriptionSerializer(subscription).data)


@extend_schema(
    tags=['Billing'],
    responses={
        200: InvoiceSerializer(many=True),
        401: OpenApiResponse(description="Missing view-invoices scope"),
    },
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, NotSuspended])
def list_invoices(request, slug):
    """
    GET /api/v1/teams/{slug}/invoices/
    """
    team = _billable_team(request, slug, 'view-invoices')
    invoices = services.list_team_invoices(team)
    return Response(InvoiceSerializer(invoices, many=True).data)


@extend_schema(
    tags=['Billing'],
    responses={
        200: InvoiceDetailSerializer,
        404: OpenApiResponse(description="Unknown invoice or another team's invoice"),
    },
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, NotSuspended])
def get_invoice(request, slug, invoice_id):
    """
    GET /api/v1/teams/{slug}/invoices/{id}/
    """
    team = _billable_team(request, slug, 'view-invoices')
    invoice = services.get_team_invoice(team, invoice_id)
    return Response(InvoiceDetailSerializer(invoice).data)
