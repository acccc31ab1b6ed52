"""
Core utility functions for the Fleet Cost Sheet System.

Contains the money helpers used by the calculation engine.
All financial calculations use Python's Decimal for precision.
"""

from decimal import ROUND_HALF_UP, Decimal, getcontext

# Set high precision for intermediate financial calculations
getcontext().prec = 28

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0')
HUNDRED = Decimal('100')
MONTHS_PER_YEAR = 12


def to_decimal(value) -> Decimal:
    """
    Coerce an int, float, str or Decimal to Decimal.

    Floats go through str() so 0.1 becomes Decimal('0.1'),
    not its binary expansion. None becomes zero.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(amount) -> Decimal:
    """Round an amount to 2 decimal places (ROUND_HALF_UP)."""
    return to_decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    """Return ``percent`` % of ``amount``, quantized to money."""
    return quantize_money(to_decimal(amount) * to_decimal(percent) / HUNDRED)


def calculate_emi(
    principal: Decimal,
    annual_rate: Decimal,
    tenure_months: int,
) -> Decimal:
    """
    Calculate EMI using the reducing-balance annuity formula.

    EMI = P × r × (1+r)^n / ((1+r)^n - 1)

    Where:
        P = principal (loan amount)
        r = monthly interest rate (annual_rate / 100 / 12)
        n = tenure in months

    A non-positive monthly rate falls back to straight-line
    repayment, P / n. A zero principal (full down payment)
    gives a zero EMI.

    Args:
        principal: Loan amount (>= 0). Accepts Decimal, float, or int.
        annual_rate: Annual interest rate as percentage (e.g., 12 for 12%).
        tenure_months: Number of months for repayment (must be >= 1).

    Returns:
        Monthly EMI amount as Decimal, quantized to 2 decimal places (ROUND_HALF_UP).

    Raises:
        ValueError: If the tenure is shorter than one month.
    """
    principal = to_decimal(principal)
    annual_rate = to_decimal(annual_rate)

    if tenure_months < 1:
        raise ValueError("Tenure must be at least 1 month.")

    monthly_rate = annual_rate / HUNDRED / Decimal(MONTHS_PER_YEAR)

    if monthly_rate <= 0:
        return quantize_money(principal / Decimal(tenure_months))

    one_plus_r = Decimal('1') + monthly_rate
    power_term = one_plus_r ** tenure_months
    emi = principal * monthly_rate * power_term / (power_term - Decimal('1'))

    return quantize_money(emi)
