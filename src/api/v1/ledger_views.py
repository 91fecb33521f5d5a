"""API v1 views for money: payments, commissions, payroll, costs and the summary."""
from __future__ import annotations

from django.db.models import Q
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.pagination import LedgerPagination, StandardResultsSetPagination
from api.v1.permissions import IsAdminRole, IsSalesTeam
from api.v1.serializers import (
    AdSpendSerializer,
    CommissionSerializer,
    ExpenseSerializer,
    LedgerQuerySerializer,
    ManualTransactionSerializer,
    PaymentInputSerializer,
    PaymentSerializer,
    SalaryGenerateInputSerializer,
    SalaryPaymentSerializer,
)
from core.exceptions import NotFoundError
from core.export import queryset_to_csv_response
from expenses.models import AdSpend, Expense, ManualTransaction
from expenses.services import (
    create_ad_spend,
    create_expense,
    create_manual_transaction,
    delete_manual_transaction,
    generate_recurring_expenses,
)
from payments.models import Commission, Payment
from payments.services import commission_balances, mark_commission_paid, register_payment
from payroll.models import SalaryPayment
from payroll.services import generate_salary_payments, mark_salary_paid
from pipeline.models import SalesSet
from reports.services import export_summary_to_excel, get_latest_exchange_rate, summarize_ledger

PAYMENT_CSV_COLUMNS = [
    ("payment_date", "Fecha"),
    ("sales_set__prospect_name", "Prospecto"),
    ("client__business_name", "Cliente"),
    (lambda payment: payment.get_payment_method_display(), "Método"),
    ("installment_months", "Cuotas"),
    ("amount_gross", "Bruto (USD)"),
    ("fee_amount", "Comisión bancaria (USD)"),
    ("amount_net", "Neto (USD)"),
    ("created_by__email", "Registrado por"),
    ("notes", "Notas"),
]


def _visible_sets(user):
    if user.is_admin:
        return SalesSet.objects.all()
    return SalesSet.objects.filter(Q(setter=user) | Q(closer=user))


# ---------------------------------------------------------------------------
# Payments & commissions
# ---------------------------------------------------------------------------

class PaymentViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """Cash received. Payments are append-only: no update, no delete."""

    queryset = (
        Payment.objects
        .select_related("sales_set", "client", "created_by")
        .prefetch_related("commissions__team_member")
    )
    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated, IsSalesTeam]
    filterset_fields = ["sales_set", "client", "payment_method", "payment_date"]
    search_fields = ["sales_set__prospect_name", "client__business_name", "notes"]
    ordering_fields = ["payment_date", "amount_gross", "created_at"]
    pagination_class = LedgerPagination

    def get_queryset(self):
        qs = super().get_queryset()
        if self.request.user.is_admin:
            return qs
        return qs.filter(sales_set__in=_visible_sets(self.request.user))

    def create(self, request, *args, **kwargs):
        serializer = PaymentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        if not _visible_sets(request.user).filter(pk=data["sales_set"]).exists():
            raise NotFoundError("SalesSet", data["sales_set"])
        payment = register_payment(
            data["sales_set"],
            amount_gross=data["amount_gross"],
            payment_method=data["payment_method"],
            actor=request.user,
            client_id=data.get("client"),
            installment_months=data.get("installment_months"),
            payment_date=data.get("payment_date"),
            notes=data.get("notes", ""),
        )
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path="export-csv")
    def export_csv(self, request):
        qs = self.filter_queryset(self.get_queryset())
        return queryset_to_csv_response(qs, PAYMENT_CSV_COLUMNS, "pagos")


class CommissionViewSet(viewsets.ReadOnlyModelViewSet):
    """Commissions owed to setters and closers. Members only see their own."""

    queryset = Commission.objects.select_related("team_member", "payment")
    serializer_class = CommissionSerializer
    filterset_fields = ["role", "is_paid", "team_member"]
    ordering_fields = ["created_at", "amount"]
    pagination_class = LedgerPagination

    def get_permissions(self):
        if self.action == "mark_paid":
            return [IsAuthenticated(), IsAdminRole()]
        return [IsAuthenticated()]

    def get_queryset(self):
        qs = super().get_queryset()
        if self.request.user.is_admin:
            return qs
        return qs.filter(team_member=self.request.user)

    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request, pk=None):
        commission = mark_commission_paid(self.get_object().pk, actor=request.user)
        return Response(CommissionSerializer(commission).data)

    @action(detail=False, methods=["get"])
    def balances(self, request):
        member = None if request.user.is_admin else request.user
        return Response(list(commission_balances(team_member=member)))


# ---------------------------------------------------------------------------
# Payroll
# ---------------------------------------------------------------------------

class SalaryPaymentViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = SalaryPayment.objects.select_related("team_member")
    serializer_class = SalaryPaymentSerializer
    permission_classes = [IsAuthenticated, IsAdminRole]
    filterset_fields = ["status", "team_member", "period_label"]
    ordering_fields = ["created_at", "amount"]
    pagination_class = StandardResultsSetPagination

    @action(detail=False, methods=["post"])
    def generate(self, request):
        serializer = SalaryGenerateInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        created = generate_salary_payments(serializer.validated_data["period_label"], actor=request.user)
        return Response(SalaryPaymentSerializer(created, many=True).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request, pk=None):
        salary = mark_salary_paid(self.get_object().pk, actor=request.user)
        return Response(SalaryPaymentSerializer(salary).data)


# ---------------------------------------------------------------------------
# Costs & manual adjustments
# ---------------------------------------------------------------------------

class ExpenseViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    queryset = Expense.objects.select_related("created_by")
    serializer_class = ExpenseSerializer
    permission_classes = [IsAuthenticated, IsAdminRole]
    filterset_fields = ["category", "recurring", "date"]
    search_fields = ["description"]
    ordering_fields = ["date", "amount_usd", "created_at"]
    pagination_class = StandardResultsSetPagination

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        expense = create_expense(
            category=data["category"],
            description=data["description"],
            amount_usd=data["amount_usd"],
            expense_date=data.get("date"),
            recurring=data.get("recurring", False),
            actor=request.user,
        )
        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="generate-recurring")
    def generate_recurring(self, request):
        result = generate_recurring_expenses(actor=request.user)
        return Response({
            "generated": result.generated_count,
            "skipped": result.skipped_count,
            "ids": result.generated_ids,
        })


class AdSpendViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    queryset = AdSpend.objects.select_related("created_by")
    serializer_class = AdSpendSerializer
    permission_classes = [IsAuthenticated, IsAdminRole]
    filterset_fields = ["platform", "period_start"]
    ordering_fields = ["period_start", "amount_usd"]
    pagination_class = StandardResultsSetPagination

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ad_spend = create_ad_spend(actor=request.user, **serializer.validated_data)
        return Response(AdSpendSerializer(ad_spend).data, status=status.HTTP_201_CREATED)


class ManualTransactionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Manual income and deductions. The only ledger rows that can be deleted."""

    queryset = ManualTransaction.objects.select_related("created_by")
    serializer_class = ManualTransactionSerializer
    permission_classes = [IsAuthenticated, IsAdminRole]
    filterset_fields = ["type", "date"]
    search_fields = ["description"]
    ordering_fields = ["date", "amount_usd"]
    pagination_class = StandardResultsSetPagination

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        manual_tx = create_manual_transaction(
            type=data["type"],
            description=data["description"],
            amount_usd=data["amount_usd"],
            transaction_date=data.get("date"),
            notes=data.get("notes", ""),
            actor=request.user,
        )
        return Response(ManualTransactionSerializer(manual_tx).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        delete_manual_transaction(kwargs["pk"], actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

class LedgerSummaryAPIView(APIView):
    """Accounting summary for a period, in USD or converted to CRC.

    Query params: ``period_start``, ``period_end`` (ISO dates, optional),
    ``currency`` (``USD`` or ``CRC``).
    """

    permission_classes = [IsAuthenticated, IsAdminRole]

    def _summary(self, request):
        serializer = LedgerQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        summary = summarize_ledger(params.get("period_start"), params.get("period_end"))
        rate = None
        if params["currency"] == "CRC":
            rate = get_latest_exchange_rate()
            summary = summary.converted(rate, currency="CRC")
        return summary, rate

    def get(self, request):
        summary, rate = self._summary(request)
        data = summary.as_dict()
        if rate is not None:
            data["exchange_rate"] = rate
        return Response(data)


class LedgerSummaryExportAPIView(LedgerSummaryAPIView):
    """Same summary as an .xlsx download."""

    def get(self, request):
        summary, _ = self._summary(request)
        return export_summary_to_excel(summary)
