"""API v1 views for the sales pipeline, clients and notifications.

Views only validate payloads and pass ``request.user`` to the service
layer. Domain errors raised there are rendered by
``api.exceptions.exception_handler``.
"""
from django.db.models import Q
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.pagination import StandardResultsSetPagination
from api.v1.permissions import IsSalesTeam
from api.v1.serializers import (
    Advance90PhaseSerializer,
    ClientAssignInputSerializer,
    ClientDetailSerializer,
    ClientSerializer,
    ClientStatusInputSerializer,
    CloseDealInputSerializer,
    DealSerializer,
    DisqualifyInputSerializer,
    FollowUpInputSerializer,
    MeSerializer,
    NotificationSerializer,
    OnboardingChecklistItemSerializer,
    OnboardingToggleInputSerializer,
    PaymentSerializer,
    PhaseStatusInputSerializer,
    SalesSetDetailSerializer,
    SalesSetSerializer,
    SetStatusHistorySerializer,
    SetTransitionInputSerializer,
)
from clients.models import Client
from clients.services import (
    assign_client,
    toggle_onboarding_item,
    update_client_status,
    update_phase_status,
)
from core.exceptions import NotFoundError
from core.services import log_activity
from notifications.models import Notification
from notifications.services import mark_all_notifications_read, mark_notification_read
from pipeline.models import SalesSet
from pipeline.services import (
    close_deal,
    create_set,
    register_disqualification,
    register_follow_up,
    update_set,
)
from pipeline.transitions import transition_set_status


class MeView(APIView):
    """Profile of the authenticated user."""

    def get(self, request):
        return Response(MeSerializer(request.user).data)


# ---------------------------------------------------------------------------
# Sets
# ---------------------------------------------------------------------------

class SalesSetViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """Booked calls. Sets are never deleted; outcomes go through the actions."""

    queryset = SalesSet.objects.select_related("setter", "closer")
    serializer_class = SalesSetSerializer
    filterset_fields = ["status", "setter", "closer", "service_offered", "is_duplicate"]
    search_fields = ["prospect_name", "prospect_ig", "prospect_whatsapp"]
    ordering_fields = ["scheduled_at", "created_at", "status"]
    pagination_class = StandardResultsSetPagination

    def get_permissions(self):
        if self.action in ("list", "retrieve", "history"):
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsSalesTeam()]

    def get_queryset(self):
        qs = super().get_queryset()
        user = self.request.user
        if user.is_admin or user.role == user.Role.DELIVERY:
            return qs
        return qs.filter(Q(setter=user) | Q(closer=user))

    def get_serializer_class(self):
        if self.action == "retrieve":
            return SalesSetDetailSerializer
        return super().get_serializer_class()

    def _get_set_id(self):
        # Scoped lookup so users cannot act on sets they cannot see.
        return self.get_object().pk

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        sales_set = create_set(actor=request.user, **serializer.validated_data)
        return Response(SalesSetSerializer(sales_set).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        sales_set = update_set(self.kwargs["pk"], actor=request.user, **serializer.validated_data)
        return Response(SalesSetSerializer(sales_set).data)

    @action(detail=True, methods=["post"])
    def transition(self, request, pk=None):
        set_id = self._get_set_id()
        serializer = SetTransitionInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        history = transition_set_status(
            set_id,
            data["status"],
            actor=request.user,
            notes=data.get("notes", ""),
            expected_status=data.get("expected_status"),
            scheduled_at=data.get("scheduled_at"),
        )
        return Response(SetStatusHistorySerializer(history).data)

    @action(detail=True, methods=["post"], url_path="close-deal")
    def close(self, request, pk=None):
        set_id = self._get_set_id()
        serializer = CloseDealInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = close_deal(set_id, actor=request.user, **serializer.validated_data)
        return Response(
            {
                "deal": DealSerializer(result.deal).data,
                "client": ClientSerializer(result.client).data,
                "payment": PaymentSerializer(result.payment).data if result.payment else None,
                "set_status": SalesSet.objects.values_list("status", flat=True).get(pk=set_id),
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"], url_path="follow-up")
    def follow_up(self, request, pk=None):
        set_id = self._get_set_id()
        serializer = FollowUpInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        deal = register_follow_up(set_id, actor=request.user, **serializer.validated_data)
        return Response(DealSerializer(deal).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def disqualify(self, request, pk=None):
        set_id = self._get_set_id()
        serializer = DisqualifyInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        deal = register_disqualification(set_id, actor=request.user, reason=serializer.validated_data["reason"])
        return Response(DealSerializer(deal).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        sales_set = self.get_object()
        rows = sales_set.status_history.select_related("changed_by")
        return Response(SetStatusHistorySerializer(rows, many=True).data)


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------

class ClientViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """Clients are created by deal closure; here they are followed up and served."""

    queryset = Client.objects.select_related("assigned_to", "deal")
    serializer_class = ClientSerializer
    filterset_fields = ["status", "service", "assigned_to"]
    search_fields = ["business_name", "contact_name", "ig"]
    ordering_fields = ["created_at", "business_name", "status"]
    pagination_class = StandardResultsSetPagination

    def get_serializer_class(self):
        if self.action == "retrieve":
            return ClientDetailSerializer
        return super().get_serializer_class()

    def perform_update(self, serializer):
        client = serializer.save()
        log_activity(self.request.user, "updated", "client", client.pk, {
            name: str(value) for name, value in serializer.validated_data.items()
        })

    @action(detail=True, methods=["post"])
    def status(self, request, pk=None):
        client = self.get_object()
        serializer = ClientStatusInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        client = update_client_status(client.pk, serializer.validated_data["status"], actor=request.user)
        return Response(ClientSerializer(client).data)

    @action(detail=True, methods=["post"])
    def assign(self, request, pk=None):
        client = self.get_object()
        serializer = ClientAssignInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        client = assign_client(client.pk, serializer.validated_data["assigned_to"], actor=request.user)
        return Response(ClientSerializer(client).data)

    @action(detail=True, methods=["get", "post"])
    def onboarding(self, request, pk=None):
        client = self.get_object()
        if request.method == "POST":
            serializer = OnboardingToggleInputSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            item_id = serializer.validated_data["item_id"]
            if not client.onboarding_items.filter(pk=item_id).exists():
                raise NotFoundError("OnboardingChecklistItem", item_id)
            item = toggle_onboarding_item(item_id, serializer.validated_data["completed"], actor=request.user)
            return Response(OnboardingChecklistItemSerializer(item).data)
        return Response(OnboardingChecklistItemSerializer(client.onboarding_items.all(), many=True).data)

    @action(detail=True, methods=["get", "post"])
    def phases(self, request, pk=None):
        client = self.get_object()
        if request.method == "POST":
            serializer = PhaseStatusInputSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            phase_id = serializer.validated_data["phase_id"]
            if not client.phases.filter(pk=phase_id).exists():
                raise NotFoundError("Advance90Phase", phase_id)
            phase = update_phase_status(phase_id, serializer.validated_data["status"], actor=request.user)
            return Response(Advance90PhaseSerializer(phase).data)
        return Response(Advance90PhaseSerializer(client.phases.all(), many=True).data)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

class NotificationViewSet(viewsets.ReadOnlyModelViewSet):
    """The authenticated user's notification tray."""

    serializer_class = NotificationSerializer
    filterset_fields = ["type", "is_read"]
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        return Notification.objects.filter(user=self.request.user)

    @action(detail=True, methods=["post"], url_path="mark-read")
    def mark_read(self, request, pk=None):
        notification = mark_notification_read(self.get_object().pk, actor=request.user)
        return Response(NotificationSerializer(notification).data)

    @action(detail=False, methods=["post"], url_path="mark-all-read")
    def mark_all_read(self, request):
        updated = mark_all_notifications_read(actor=request.user)
        return Response({"updated": updated})
