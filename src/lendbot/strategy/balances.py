"""Balance reconciliation and loan sizing.

Pure functions over one cycle's snapshot. Funds locked in the current offer
count as available because canceling the offer returns them immediately.
"""

from decimal import Decimal

from lendbot.models import ActiveOffer, Wallet

# Replace an offer whose rate drifted more than 1% from the target
RATE_TOLERANCE = Decimal("0.01")

# Replace an offer that is more than one unit above the target amount
AMOUNT_TOLERANCE = Decimal("1")


def compute_balances(
    wallet: Wallet, active_offer: ActiveOffer | None
) -> tuple[Decimal, Decimal]:
    """Return ``(available_balance, total_balance)``.

    Args:
        wallet: Funding wallet snapshot.
        active_offer: The offer currently standing, if any.
    """
    locked = active_offer.amount if active_offer is not None else Decimal("0")
    return wallet.available_balance + locked, wallet.balance


def compute_loan_amount(
    min_amount: Decimal,
    available_balance: Decimal,
    total_balance: Decimal,
    max_balance_percent_per_loan: Decimal,
) -> Decimal:
    """Clamp the loan size to the liquid balance and the per-loan cap.

    Never goes below ``min_amount``; callers must already have checked that
    ``available_balance >= min_amount``.
    """
    cap = total_balance * max_balance_percent_per_loan
    return max(min_amount, min(available_balance, cap))


def needs_replacement(
    active_offer: ActiveOffer, loan_amount: Decimal, rate: Decimal
) -> bool:
    """Decide whether a standing offer is too far from the current target.

    The amount check is signed: only an offer larger than the target by more
    than AMOUNT_TOLERANCE is replaced, a smaller one is left standing.
    """
    if rate == 0:
        rate_drifted = active_offer.rate != 0
    else:
        rate_drifted = abs(active_offer.rate - rate) / rate > RATE_TOLERANCE
    amount_diff = active_offer.amount - loan_amount
    return rate_drifted or amount_diff > AMOUNT_TOLERANCE
