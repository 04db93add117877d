"""API views for the commission engine."""
from __future__ import annotations

import logging

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import filters, permissions, serializers, status, viewsets
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.response import Response
from rest_framework.views import APIView

from commissions.commission_serializers import (
    CommissionRuleSetSerializer,
    CommissionRuleSetWriteSerializer,
    ComputeRequestSerializer,
    LeaderboardQuerySerializer,
    MetricsQuerySerializer,
    MonthlyCommissionSerializer,
    RecomputeRequestSerializer,
)
from commissions.exceptions import CommissionConfigurationError, UnknownMemberError
from commissions.models import CommissionRuleSet, MonthlyCommission
from commissions.periods import current_month
from commissions.services import compute_monthly_commission, get_user_metrics, rank_cohort
from organizations.models import Organization, OrganizationMember

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────
# Permission helpers
# ────────────────────────────────────────────────────────────

class IsAdminOrManager(permissions.BasePermission):
    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return _is_manager(request.user)


def _is_manager(user) -> bool:
    return bool(getattr(user, "can_manage_commissions", False))


def _resolve_organization(request):
    """Organization of the request: the caller's membership, or ``?organization=`` for superusers."""
    user = request.user
    organization_id = request.query_params.get("organization")
    if not organization_id and isinstance(request.data, dict):
        organization_id = request.data.get("organization")

    if organization_id and user.is_superuser:
        try:
            return Organization.objects.filter(pk=organization_id, is_active=True).first()
        except DjangoValidationError:
            return None

    membership = (
        OrganizationMember.objects
        .filter(user=user, is_active=True, organization__is_active=True)
        .select_related("organization")
        .first()
    )
    if membership:
        return membership.organization
    return None


def _require_organization(request):
    organization = _resolve_organization(request)
    if organization is None:
        raise NotFound("Organization not found.")
    return organization


def _target_user_id(request, requested_user_id, organization):
    """The caller's own id, or another member's id when the caller manages the organization."""
    if not requested_user_id or str(requested_user_id) == str(request.user.id):
        return str(request.user.id)
    if not _is_manager(request.user):
        raise PermissionDenied("You can only access your own commissions.")
    if not OrganizationMember.objects.filter(
        user_id=requested_user_id, organization=organization,
    ).exists():
        raise NotFound("User is not a member of this organization.")
    return str(requested_user_id)


def _rules_missing_response(exc):
    return Response(
        {"detail": str(exc), "code": "commission_rules_missing"},
        status=status.HTTP_409_CONFLICT,
    )


# ────────────────────────────────────────────────────────────
# Rule sets
# ────────────────────────────────────────────────────────────

class CommissionRuleSetViewSet(viewsets.ModelViewSet):
    """CRUD for commission rule sets. Update creates a new versioned rule set."""
    permission_classes = [permissions.IsAuthenticated, IsAdminOrManager]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["type", "version", "created_at"]

    def get_queryset(self):
        organization = _resolve_organization(self.request)
        if organization is None:
            return CommissionRuleSet.objects.none()
        qs = CommissionRuleSet.objects.filter(organization=organization).prefetch_related("tiers")
        commission_type = self.request.query_params.get("type")
        if commission_type:
            qs = qs.filter(type=commission_type)
        if self.request.query_params.get("active") in ("1", "true", "True"):
            qs = qs.filter(is_active=True)
        return qs

    def get_serializer_class(self):
        if self.action in ("create", "update", "partial_update"):
            return CommissionRuleSetWriteSerializer
        return CommissionRuleSetSerializer

    def perform_create(self, serializer):
        organization = _resolve_organization(self.request)
        if organization is None:
            raise serializers.ValidationError({"organization": "Organization not found."})
        serializer.save(organization=organization, updated_by=self.request.user)

    def perform_update(self, serializer):
        # Write serializer handles versioning; the new active version
        # queues the month recompute through the rule-set signal.
        serializer.save(updated_by=self.request.user)


# ────────────────────────────────────────────────────────────
# Monthly records
# ────────────────────────────────────────────────────────────

class MonthlyCommissionViewSet(viewsets.ReadOnlyModelViewSet):
    """Stored monthly snapshots. Non-managers only see their own."""
    serializer_class = MonthlyCommissionSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["month", "total_commission", "updated_at"]

    def get_queryset(self):
        user = self.request.user
        qs = MonthlyCommission.objects.select_related("user")
        if _is_manager(user):
            organization = _resolve_organization(self.request)
            if organization is None:
                return MonthlyCommission.objects.none()
            qs = qs.filter(organization=organization)
            requested_user = self.request.query_params.get("user")
            if requested_user:
                try:
                    qs = qs.filter(user_id=requested_user)
                except DjangoValidationError:
                    return MonthlyCommission.objects.none()
        else:
            qs = qs.filter(user=user)

        month = self.request.query_params.get("month")
        if month:
            qs = qs.filter(month=month)
        department = self.request.query_params.get("department")
        if department:
            qs = qs.filter(department=department)
        return qs


# ────────────────────────────────────────────────────────────
# Engine endpoints
# ────────────────────────────────────────────────────────────

class ComputeCommissionView(APIView):
    """
    POST /api/v1/commissions/compute/
    Body: {"month": "YYYY-MM", "user": "<uuid>"} (user optional, defaults to caller)
    Synchronous recompute returning the fresh record.
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        payload = ComputeRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        organization = _require_organization(request)
        user_id = _target_user_id(request, payload.validated_data.get("user"), organization)

        try:
            record = compute_monthly_commission(
                user_id,
                payload.validated_data["month"],
                trigger=MonthlyCommission.TriggerSource.MANUAL,
            )
        except CommissionConfigurationError as exc:
            return _rules_missing_response(exc)
        except UnknownMemberError as exc:
            raise NotFound(str(exc)) from exc
        return Response(record.as_dict())


class RecomputeView(APIView):
    """
    POST /api/v1/commissions/recompute/
    Body: {"month": "YYYY-MM", "user": "<uuid>"} (both optional)
    """
    permission_classes = [permissions.IsAuthenticated, IsAdminOrManager]

    def post(self, request):
        payload = RecomputeRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        organization = _require_organization(request)
        month = payload.validated_data.get("month") or current_month()
        user_id = payload.validated_data.get("user")

        from commissions.tasks import recompute_organization_month, recompute_user_commission

        if user_id:
            user_id = _target_user_id(request, user_id, organization)
            recompute_user_commission.delay(user_id=user_id, month=month, trigger="MANUAL")
            return Response(
                {"detail": f"Recompute queued for user {user_id} ({month})."},
                status=status.HTTP_202_ACCEPTED,
            )
        recompute_organization_month.delay(
            organization_id=str(organization.id), month=month, trigger="MANUAL",
        )
        return Response(
            {"detail": f"Recompute queued for the whole organization ({month})."},
            status=status.HTTP_202_ACCEPTED,
        )


class LeaderboardView(APIView):
    """
    GET /api/v1/commissions/leaderboard/?month=YYYY-MM&type=sales&limit=10
    Ranked cohort of the caller's organization.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        query = LeaderboardQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        organization = _require_organization(request)

        month = query.validated_data.get("month") or current_month()
        commission_type = query.validated_data.get("type")
        limit = query.validated_data.get("limit") or settings.COMMISSION_LEADERBOARD_DEFAULT_LIMIT

        entries = rank_cohort(organization.id, month, commission_type, limit)
        me_id = str(request.user.id)
        return Response(
            {
                "month": month,
                "type": commission_type,
                "currency": settings.CURRENCY,
                "entries": [
                    {**entry.as_dict(), "is_me": entry.user_id == me_id}
                    for entry in entries
                ],
            }
        )


class MetricsView(APIView):
    """
    GET /api/v1/commissions/metrics/?month=YYYY-MM&user=<uuid>
    Snapshot, growth, rank, target share and badges. Managers may ask for any member.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        query = MetricsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        organization = _require_organization(request)
        user_id = _target_user_id(request, query.validated_data.get("user"), organization)
        month = query.validated_data.get("month") or current_month()

        try:
            metrics = get_user_metrics(user_id, month)
        except CommissionConfigurationError as exc:
            return _rules_missing_response(exc)
        except UnknownMemberError as exc:
            raise NotFound(str(exc)) from exc

        return Response(
            {
                "month": month,
                "currency": settings.CURRENCY,
                "record": metrics["record"].as_dict(),
                "growth_percent": metrics["growth_percent"],
                "rank": metrics["rank"],
                "target_percent": metrics["target_percent"],
                "badges": metrics["badges"],
                "streak": metrics["streak"],
            }
        )
