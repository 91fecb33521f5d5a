"""
Processor fee and commission arithmetic.

Pure functions over :class:`~decimal.Decimal`. Nothing here rounds: stored
amounts keep the exact product so that ``net = gross - fee`` holds to the
cent and commissions add up across payments. Use :func:`quantize_money`
only when presenting a figure.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")

# Card processor surcharge by number of monthly installments.
INSTALLMENT_FEE_TABLE = {
    3: Decimal("0.075"),
    6: Decimal("0.10"),
    12: Decimal("0.14"),
}

COMMISSION_RATES = {
    "setter": Decimal("0.05"),
    "closer": Decimal("0.10"),
}


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places using ROUND_HALF_UP."""
    return Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def to_decimal(value) -> Decimal:
    """Coerce ints, strings and Decimals; floats go through ``str`` to avoid binary noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


@dataclass(frozen=True)
class FeeBreakdown:
    fee_percentage: Decimal
    fee_amount: Decimal
    net_amount: Decimal


def fee_rate_for(installment_months: int | None) -> Decimal:
    """Rate for an installment plan; no plan or an unknown plan costs nothing."""
    if not installment_months:
        return ZERO
    return INSTALLMENT_FEE_TABLE.get(int(installment_months), ZERO)


def compute_fee(gross, installment_months: int | None = None) -> FeeBreakdown:
    """Split *gross* into processor fee and net amount.

    Parameters
    ----------
    gross:
        Amount charged to the client.
    installment_months:
        Installment plan length, ``None`` for a single charge.

    Returns
    -------
    FeeBreakdown
        ``fee_amount = gross * fee_percentage`` and
        ``net_amount = gross - fee_amount``, both unrounded.
    """
    gross = to_decimal(gross)
    rate = fee_rate_for(installment_months)
    fee_amount = gross * rate
    return FeeBreakdown(
        fee_percentage=rate,
        fee_amount=fee_amount,
        net_amount=gross - fee_amount,
    )


def compute_commission(net, role: str) -> Decimal:
    """Commission owed to a team member in *role* on a *net* amount.

    Raises
    ------
    KeyError
        If *role* does not earn commission.
    """
    return to_decimal(net) * COMMISSION_RATES[role]
