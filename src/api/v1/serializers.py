"""Serializers for API v1.

Read serializers expose the models; the ``*InputSerializer`` classes only
validate request payloads before they are handed to the service layer,
which owns every write.
"""
from decimal import Decimal

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from accounts.models import User
from clients.models import Advance90Phase, Client, OnboardingChecklistItem
from expenses.models import AdSpend, Expense, ManualTransaction
from notifications.models import Notification
from payments.fees import INSTALLMENT_FEE_TABLE
from payments.models import Commission, Payment
from payroll.models import SalaryPayment
from pipeline.models import Deal, SalesSet, SetStatusHistory


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class MeSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(source="get_full_name", read_only=True)
    is_admin = serializers.BooleanField(read_only=True)

    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name", "full_name", "whatsapp", "role", "is_admin"]
        read_only_fields = fields


class AgencyTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Token pair plus the profile of the user who logged in."""

    def validate(self, attrs):
        data = super().validate(attrs)
        data["user"] = MeSerializer(self.user).data
        return data


class TeamMemberSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(source="get_full_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "email", "full_name", "role"]
        read_only_fields = fields


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

class SetStatusHistorySerializer(serializers.ModelSerializer):
    changed_by_name = serializers.CharField(source="changed_by.get_full_name", read_only=True, default="")

    class Meta:
        model = SetStatusHistory
        fields = ["id", "old_status", "new_status", "changed_by", "changed_by_name", "notes", "created_at"]
        read_only_fields = fields


class DealSerializer(serializers.ModelSerializer):
    class Meta:
        model = Deal
        fields = [
            "id", "sales_set", "outcome", "service_sold", "revenue_total",
            "phantom_link", "closer_notes", "follow_up_date", "follow_up_notes",
            "disqualified_reason", "recorded_by", "created_at",
        ]
        read_only_fields = fields


class SalesSetSerializer(serializers.ModelSerializer):
    setter_name = serializers.CharField(source="setter.get_full_name", read_only=True)
    closer_name = serializers.CharField(source="closer.get_full_name", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    closer = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(is_active=True))

    class Meta:
        model = SalesSet
        fields = [
            "id", "prospect_name", "prospect_whatsapp", "prospect_ig", "prospect_web",
            "setter", "setter_name", "closer", "closer_name", "scheduled_at",
            "summary", "service_offered", "status", "status_display", "is_duplicate",
            "created_at", "updated_at",
        ]
        read_only_fields = ["id", "setter", "status", "is_duplicate", "created_at", "updated_at"]


class SalesSetDetailSerializer(SalesSetSerializer):
    deals = DealSerializer(many=True, read_only=True)

    class Meta(SalesSetSerializer.Meta):
        fields = SalesSetSerializer.Meta.fields + ["deals"]


class SetTransitionInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=SalesSet.Status.choices)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    expected_status = serializers.ChoiceField(choices=SalesSet.Status.choices, required=False)
    scheduled_at = serializers.DateTimeField(required=False)

    def validate(self, attrs):
        if attrs["status"] == SalesSet.Status.REAGENDO and not attrs.get("scheduled_at"):
            raise serializers.ValidationError({"scheduled_at": "Indicá la nueva fecha de la llamada."})
        return attrs


class CloseDealInputSerializer(serializers.Serializer):
    service_sold = serializers.ChoiceField(choices=SalesSet.Service.choices)
    revenue_total = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    amount_collected = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False,
    )
    payment_method = serializers.ChoiceField(choices=Payment.Method.choices, required=False)
    installment_months = serializers.ChoiceField(
        choices=sorted(INSTALLMENT_FEE_TABLE), required=False, allow_null=True,
    )
    phantom_link = serializers.URLField(required=False, allow_blank=True, default="")
    closer_notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs.get("amount_collected") and not attrs.get("payment_method"):
            raise serializers.ValidationError({"payment_method": "Indicá el método del pago cobrado."})
        return attrs


class FollowUpInputSerializer(serializers.Serializer):
    follow_up_date = serializers.DateField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class DisqualifyInputSerializer(serializers.Serializer):
    reason = serializers.CharField()


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------

class OnboardingChecklistItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OnboardingChecklistItem
        fields = ["id", "item_key", "label", "position", "completed", "completed_at", "completed_by"]
        read_only_fields = ["id", "item_key", "label", "position", "completed_at", "completed_by"]


class Advance90PhaseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Advance90Phase
        fields = ["id", "phase_name", "start_day", "end_day", "start_date", "end_date", "order", "status"]
        read_only_fields = ["id", "phase_name", "start_day", "end_day", "start_date", "end_date", "order"]


class ClientSerializer(serializers.ModelSerializer):
    assigned_to_name = serializers.CharField(source="assigned_to.get_full_name", read_only=True, default="")
    revenue_total = serializers.DecimalField(
        source="deal.revenue_total", max_digits=12, decimal_places=2, read_only=True,
    )

    class Meta:
        model = Client
        fields = [
            "id", "deal", "sales_set", "business_name", "contact_name", "whatsapp",
            "ig", "web", "service", "status", "assigned_to", "assigned_to_name",
            "revenue_total", "created_at", "updated_at",
        ]
        read_only_fields = [
            "id", "deal", "sales_set", "service", "status", "assigned_to",
            "created_at", "updated_at",
        ]


class ClientDetailSerializer(ClientSerializer):
    onboarding_items = OnboardingChecklistItemSerializer(many=True, read_only=True)
    phases = Advance90PhaseSerializer(many=True, read_only=True)

    class Meta(ClientSerializer.Meta):
        fields = ClientSerializer.Meta.fields + ["onboarding_items", "phases"]


class ClientStatusInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Client.Status.choices)


class ClientAssignInputSerializer(serializers.Serializer):
    assigned_to = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(is_active=True))


class OnboardingToggleInputSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    completed = serializers.BooleanField()


class PhaseStatusInputSerializer(serializers.Serializer):
    phase_id = serializers.UUIDField()
    status = serializers.ChoiceField(choices=Advance90Phase.Status.choices)


# ---------------------------------------------------------------------------
# Payments & commissions
# ---------------------------------------------------------------------------

class CommissionSerializer(serializers.ModelSerializer):
    team_member_name = serializers.CharField(source="team_member.get_full_name", read_only=True)

    class Meta:
        model = Commission
        fields = [
            "id", "payment", "team_member", "team_member_name", "role",
            "percentage", "amount", "is_paid", "paid_date", "created_at",
        ]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    prospect_name = serializers.CharField(source="sales_set.prospect_name", read_only=True)
    commissions = CommissionSerializer(many=True, read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id", "sales_set", "prospect_name", "client", "amount_gross", "payment_method",
            "installment_months", "fee_percentage", "fee_amount", "amount_net",
            "payment_date", "notes", "created_by", "commissions", "created_at",
        ]
        read_only_fields = fields


class PaymentInputSerializer(serializers.Serializer):
    sales_set = serializers.UUIDField()
    client = serializers.UUIDField(required=False, allow_null=True)
    amount_gross = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    payment_method = serializers.ChoiceField(choices=Payment.Method.choices)
    installment_months = serializers.ChoiceField(
        choices=sorted(INSTALLMENT_FEE_TABLE), required=False, allow_null=True,
    )
    payment_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


# ---------------------------------------------------------------------------
# Payroll, costs, adjustments
# ---------------------------------------------------------------------------

class SalaryPaymentSerializer(serializers.ModelSerializer):
    team_member_name = serializers.CharField(source="team_member.get_full_name", read_only=True)

    class Meta:
        model = SalaryPayment
        fields = ["id", "team_member", "team_member_name", "amount", "period_label", "status", "paid_date", "created_at"]
        read_only_fields = fields


class SalaryGenerateInputSerializer(serializers.Serializer):
    period_label = serializers.CharField(max_length=50)


class ExpenseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Expense
        fields = [
            "id", "category", "description", "amount_usd", "date", "recurring",
            "recurring_source", "created_by", "created_at",
        ]
        read_only_fields = ["id", "recurring_source", "created_by", "created_at"]
        extra_kwargs = {"date": {"required": False}}


class AdSpendSerializer(serializers.ModelSerializer):
    class Meta:
        model = AdSpend
        fields = ["id", "platform", "period_start", "period_end", "amount_usd", "notes", "created_by", "created_at"]
        read_only_fields = ["id", "created_by", "created_at"]


class ManualTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = ManualTransaction
        fields = ["id", "type", "description", "amount_usd", "date", "notes", "created_by", "created_at"]
        read_only_fields = ["id", "created_by", "created_at"]
        extra_kwargs = {"date": {"required": False}}


# ---------------------------------------------------------------------------
# Notifications & ledger
# ---------------------------------------------------------------------------

class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ["id", "type", "title", "message", "action_url", "payload", "is_read", "read_at", "created_at"]
        read_only_fields = fields


class LedgerQuerySerializer(serializers.Serializer):
    period_start = serializers.DateField(required=False)
    period_end = serializers.DateField(required=False)
    currency = serializers.ChoiceField(choices=["USD", "CRC"], required=False, default="USD")

    def validate(self, attrs):
        start, end = attrs.get("period_start"), attrs.get("period_end")
        if start and end and end < start:
            raise serializers.ValidationError({"period_end": "El fin del periodo no puede ser anterior al inicio."})
        return attrs
