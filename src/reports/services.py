"""Service functions for the reports app.

The ledger summary reads payments, costs, payouts and pipeline counts for
a period and reconciles them into one consistent set of figures. It only
reads; call it outside write transactions.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields, replace
from datetime import date
from decimal import Decimal

import requests
from django.conf import settings
from django.db.models import Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from core.export import rows_to_xlsx_response
from payments.fees import quantize_money
from reports.models import ExchangeRate

logger = logging.getLogger("agency")

ZERO = Decimal("0.00")


# ---------------------------------------------------------------------------
# Ledger summary
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AccountingSummary:
    period_start: date | None
    period_end: date | None

    cash_collected: Decimal = ZERO
    cash_net: Decimal = ZERO
    bank_fees: Decimal = ZERO
    revenue: Decimal = ZERO
    total_expenses: Decimal = ZERO
    total_ad_spend: Decimal = ZERO
    total_salaries: Decimal = ZERO
    total_commissions: Decimal = ZERO
    unpaid_commissions: Decimal = ZERO
    manual_income: Decimal = ZERO
    manual_deductions: Decimal = ZERO
    margin: Decimal = ZERO

    total_sets: int = 0
    total_clients: int = 0
    total_deals: int = 0
    closed_deals_count: int = 0

    cost_per_client: Decimal = ZERO
    cost_per_set: Decimal = ZERO
    cost_per_call: Decimal = ZERO
    cost_per_closed: Decimal = ZERO

    currency: str = "USD"

    @classmethod
    def money_fields(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if f.type in ("Decimal", Decimal))

    def as_dict(self) -> dict:
        return asdict(self)

    def converted(self, rate, currency: str = "CRC") -> "AccountingSummary":
        """Same summary with every money figure multiplied by *rate*."""
        rate = Decimal(str(rate))
        changes = {name: getattr(self, name) * rate for name in self.money_fields()}
        return replace(self, currency=currency, **changes)


def _date_filter(field: str, start: date | None, end: date | None) -> Q:
    q = Q()
    if start is not None:
        q &= Q(**{f"{field}__gte": start})
    if end is not None:
        q &= Q(**{f"{field}__lte": end})
    return q


def _sum(qs, field: str) -> Decimal:
    return qs.aggregate(total=Coalesce(Sum(field), Value(ZERO)))["total"]


def _per_unit(total: Decimal, count: int) -> Decimal:
    if not count:
        return ZERO
    return quantize_money(total / count)


def summarize_ledger(period_start: date | None = None, period_end: date | None = None) -> AccountingSummary:
    """Compute the accounting summary for ``[period_start, period_end]``.

    Parameters
    ----------
    period_start, period_end:
        Inclusive bounds. Either may be omitted for an open-ended range;
        omitting both covers all time.

    Returns
    -------
    AccountingSummary
        Zeros everywhere when the period holds no records.

    Notes
    -----
    Records land in a period by two different dates:

    * payments, expenses, ad spend and manual transactions by their own
      money date; revenue (closed deals) and commissions follow the
      payments of the period, so a deal counts in the period its money
      moved, not the one it was created in;
    * salaries and the set, client and deal counts used for unit costs
      by their creation date.
    """
    from clients.models import Client
    from expenses.models import AdSpend, Expense, ManualTransaction
    from payments.models import Commission, Payment
    from payroll.models import SalaryPayment
    from pipeline.models import Deal, SalesSet

    # -- Money axis --
    payments = Payment.objects.filter(_date_filter("payment_date", period_start, period_end))
    payment_totals = payments.aggregate(
        gross=Coalesce(Sum("amount_gross"), Value(ZERO)),
        net=Coalesce(Sum("amount_net"), Value(ZERO)),
        fees=Coalesce(Sum("fee_amount"), Value(ZERO)),
    )

    closed_deals = Deal.objects.filter(
        outcome=Deal.Outcome.CLOSED, sales_set_id__in=payments.values("sales_set_id"),
    )
    commissions = Commission.objects.filter(payment_id__in=payments.values("pk"))

    revenue = _sum(closed_deals, "revenue_total")
    commission_totals = commissions.aggregate(
        total=Coalesce(Sum("amount"), Value(ZERO)),
        unpaid=Coalesce(Sum("amount", filter=Q(is_paid=False)), Value(ZERO)),
    )

    total_expenses = _sum(Expense.objects.filter(_date_filter("date", period_start, period_end)), "amount_usd")
    total_ad_spend = _sum(
        AdSpend.objects.filter(_date_filter("period_start", period_start, period_end)),
        "amount_usd",
    )
    manual = ManualTransaction.objects.filter(_date_filter("date", period_start, period_end))
    manual_totals = manual.aggregate(
        income=Coalesce(
            Sum("amount_usd", filter=Q(type=ManualTransaction.Type.INGRESO)), Value(ZERO),
        ),
        deductions=Coalesce(
            Sum("amount_usd", filter=Q(type=ManualTransaction.Type.EGRESO)), Value(ZERO),
        ),
    )

    # -- Creation axis --
    created = _date_filter("created_at__date", period_start, period_end)
    total_salaries = _sum(SalaryPayment.objects.filter(created), "amount")
    total_sets = SalesSet.objects.filter(created).count()
    total_clients = Client.objects.filter(created).count()
    deals_in_period = Deal.objects.filter(created)
    total_deals = deals_in_period.count()
    closed_deals_count = deals_in_period.filter(outcome=Deal.Outcome.CLOSED).count()

    cash_net = payment_totals["net"]
    margin = (
        cash_net
        + manual_totals["income"]
        - total_expenses
        - total_salaries
        - commission_totals["total"]
        - total_ad_spend
        - manual_totals["deductions"]
    )

    summary = AccountingSummary(
        period_start=period_start,
        period_end=period_end,
        cash_collected=payment_totals["gross"],
        cash_net=cash_net,
        bank_fees=payment_totals["fees"],
        revenue=revenue,
        total_expenses=total_expenses,
        total_ad_spend=total_ad_spend,
        total_salaries=total_salaries,
        total_commissions=commission_totals["total"],
        unpaid_commissions=commission_totals["unpaid"],
        manual_income=manual_totals["income"],
        manual_deductions=manual_totals["deductions"],
        margin=margin,
        total_sets=total_sets,
        total_clients=total_clients,
        total_deals=total_deals,
        closed_deals_count=closed_deals_count,
        cost_per_client=_per_unit(total_ad_spend, total_clients),
        cost_per_set=_per_unit(total_ad_spend, total_sets),
        cost_per_call=_per_unit(total_ad_spend, total_deals),
        cost_per_closed=_per_unit(total_ad_spend, closed_deals_count),
    )
    logger.debug(
        "Ledger summary %s..%s: collected=%s margin=%s",
        period_start,
        period_end,
        summary.cash_collected,
        summary.margin,
    )
    return summary


# ---------------------------------------------------------------------------
# Exchange rate
# ---------------------------------------------------------------------------

def get_latest_exchange_rate() -> Decimal:
    """Most recent stored USD to CRC rate, or the configured fallback."""
    latest = ExchangeRate.objects.order_by("-date").first()
    if latest is not None:
        return latest.usd_to_crc
    return Decimal(str(settings.DEFAULT_USD_TO_CRC))


def refresh_exchange_rate(timeout: int = 10) -> ExchangeRate:
    """Fetch today's USD to CRC rate and store it.

    Raises ``requests.RequestException`` when the provider is unreachable
    or answers with an error status. A payload without a CRC rate stores
    the configured fallback.
    """
    response = requests.get(settings.EXCHANGE_RATE_API_URL, timeout=timeout)
    response.raise_for_status()
    data = response.json()

    rate = (data.get("rates") or {}).get("CRC")
    if rate is None:
        rate = settings.DEFAULT_USD_TO_CRC
        logger.warning("Exchange rate payload had no CRC rate, storing fallback %s.", rate)

    exchange_rate, _ = ExchangeRate.objects.update_or_create(
        date=timezone.localdate(),
        defaults={
            "usd_to_crc": Decimal(str(rate)),
            "source": settings.EXCHANGE_RATE_SOURCE,
        },
    )
    logger.info("Exchange rate for %s: 1 USD = %s CRC", exchange_rate.date, exchange_rate.usd_to_crc)
    return exchange_rate


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

SUMMARY_LABELS = (
    ("cash_collected", "Cobrado (bruto)"),
    ("cash_net", "Cobrado (neto)"),
    ("bank_fees", "Comisiones bancarias"),
    ("revenue", "Revenue"),
    ("total_expenses", "Gastos"),
    ("total_ad_spend", "Inversión publicitaria"),
    ("total_salaries", "Salarios"),
    ("total_commissions", "Comisiones"),
    ("unpaid_commissions", "Comisiones pendientes"),
    ("manual_income", "Ingresos manuales"),
    ("manual_deductions", "Egresos manuales"),
    ("margin", "Margen"),
    ("total_sets", "Sets"),
    ("total_clients", "Clientes"),
    ("total_deals", "Llamadas"),
    ("closed_deals_count", "Deals cerrados"),
    ("cost_per_client", "Costo por cliente"),
    ("cost_per_set", "Costo por set"),
    ("cost_per_call", "Costo por llamada"),
    ("cost_per_closed", "Costo por cierre"),
)


def export_summary_to_excel(summary: AccountingSummary):
    """Return the summary as an .xlsx download."""
    money = set(AccountingSummary.money_fields())
    rows = [
        (label, quantize_money(getattr(summary, name)) if name in money else getattr(summary, name))
        for name, label in SUMMARY_LABELS
    ]
    start = summary.period_start.isoformat() if summary.period_start else "inicio"
    end = summary.period_end.isoformat() if summary.period_end else "hoy"
    return rows_to_xlsx_response(
        title=f"Resumen contable ({summary.currency})",
        rows=rows,
        filename=f"resumen_{start}_{end}",
        header=("Indicador", "Valor"),
    )
