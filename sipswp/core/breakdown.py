"""Year-by-year breakdown tables derived from the projection series."""

from __future__ import annotations

import logging
from typing import List

from pydantic import BaseModel

from sipswp.core.projection import (
    SIPInput,
    SIPProjection,
    SWPProjection,
    round_currency,
    sip_maturity_value,
)

logger = logging.getLogger(__name__)


class SIPYearRow(BaseModel):
    year: int
    investment: int  # contributed during this year
    interest: int  # earned during this year
    balance: int


class SWPYearRow(BaseModel):
    year: int
    withdrawal: int
    balance: int


def reconcile_final_row(rows: List[SIPYearRow], maturity_value: float) -> List[SIPYearRow]:
    """
    Make the last row agree with an independently computed maturity value.

    If the two differ by more than one unit, the whole difference goes into the
    final year's interest and balance. Earlier rows are left alone.
    """
    if not rows:
        return rows

    target = round_currency(maturity_value)
    last = rows[-1]
    diff = target - last.balance
    if abs(diff) <= 1:
        return rows

    logger.debug("Folding %s into year %s of the breakdown", diff, last.year)
    rows[-1] = last.model_copy(
        update={"interest": last.interest + diff, "balance": target}
    )
    return rows


def sip_breakdown(params: SIPInput, projection: SIPProjection) -> List[SIPYearRow]:
    """Nominal yearly breakdown; each row satisfies prev.balance + investment + interest == balance."""
    investment = round_currency(params.monthlyInvestment * 12)

    rows: List[SIPYearRow] = []
    previous = 0
    for index, balance in enumerate(projection.nominalYearlyBalances):
        rows.append(
            SIPYearRow(
                year=index + 1,
                investment=investment,
                interest=balance - previous - investment,
                balance=balance,
            )
        )
        previous = balance

    maturity = sip_maturity_value(params.monthlyInvestment, params.returnRate, params.duration)
    return reconcile_final_row(rows, maturity)


def swp_breakdown(projection: SWPProjection) -> List[SWPYearRow]:
    return [
        SWPYearRow(year=index + 1, withdrawal=withdrawal, balance=balance)
        for index, (withdrawal, balance) in enumerate(
            zip(projection.yearlyWithdrawals, projection.yearlyBalances)
        )
    ]


__all__ = [
    "SIPYearRow",
    "SWPYearRow",
    "reconcile_final_row",
    "sip_breakdown",
    "swp_breakdown",
]
