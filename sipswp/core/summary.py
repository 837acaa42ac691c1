from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from sipswp.core.projection import SIPInput, SIPProjection, SWPInput, SWPProjection


class Sustainability(str, Enum):
    SUSTAINABLE = "sustainable"
    AT_RISK = "at_risk"
    DEPLETED = "depleted"


SUSTAINABILITY_ADVICE = {
    Sustainability.SUSTAINABLE: (
        "Your withdrawal plan is highly sustainable. The portfolio maintains most "
        "of its value while providing regular income."
    ),
    Sustainability.AT_RISK: (
        "Consider reducing withdrawals to preserve capital for longer-term sustainability."
    ),
    Sustainability.DEPLETED: (
        "This withdrawal rate depletes your portfolio. Consider reducing monthly "
        "withdrawals or exploring other income sources."
    ),
}

# inflation-adjusted checkpoints reported with every SIP result (in years)
SHORT_TERM_YEARS = 3
MEDIUM_TERM_YEARS = 5
LONG_TERM_YEARS = 10


class SIPSummary(BaseModel):
    totalInvestment: float
    expectedReturns: float
    totalValue: int
    realReturns: float
    inflationAdjustedValue: int
    annualizedReturn: float  # percent
    wealthMultiplier: float
    realReturnPct: float
    shortTerm: int
    mediumTerm: int
    longTerm: int


class SWPSummary(BaseModel):
    totalWithdrawals: float
    finalBalance: int
    capitalPreservationPct: float
    yearlyWithdrawalRatePct: float
    yearsOfCoverage: Optional[int] = None  # None -> lasts the full duration
    sustainability: Sustainability
    advice: str


def annualized_return_pct(final_value: float, total_invested: float, years: int) -> float:
    """(final / invested)^(1/years) - 1, as a percentage with 2 decimals."""
    if total_invested <= 0 or years <= 0 or final_value <= 0:
        return 0.0
    return round(((final_value / total_invested) ** (1 / years) - 1) * 100, 2)


def _milestone(series: List[int], years: int) -> int:
    return series[min(years, len(series)) - 1]


def summarize_sip(params: SIPInput, projection: SIPProjection) -> SIPSummary:
    total_investment = params.monthlyInvestment * params.duration * 12
    nominal_final = projection.nominalYearlyBalances[-1]
    real_final = projection.yearlyBalances[-1]

    return SIPSummary(
        totalInvestment=total_investment,
        expectedReturns=nominal_final - total_investment,
        totalValue=nominal_final,
        realReturns=real_final - total_investment,
        inflationAdjustedValue=real_final,
        annualizedReturn=annualized_return_pct(nominal_final, total_investment, params.duration),
        wealthMultiplier=round(real_final / total_investment, 2),
        realReturnPct=round((real_final / total_investment - 1) * 100, 1),
        shortTerm=_milestone(projection.yearlyBalances, SHORT_TERM_YEARS),
        mediumTerm=_milestone(projection.yearlyBalances, MEDIUM_TERM_YEARS),
        longTerm=_milestone(projection.yearlyBalances, LONG_TERM_YEARS),
    )


def years_of_coverage(yearly_balances: List[int]) -> Optional[int]:
    """Whole years funded before the pot hit zero, or None if it never did."""
    for index, balance in enumerate(yearly_balances):
        if balance <= 0:
            return index
    return None


def sustainability_for(final_balance: float, initial_investment: float) -> Sustainability:
    if final_balance > initial_investment * 0.8:
        return Sustainability.SUSTAINABLE
    if final_balance > 0:
        return Sustainability.AT_RISK
    return Sustainability.DEPLETED


def summarize_swp(params: SWPInput, projection: SWPProjection) -> SWPSummary:
    final_balance = projection.yearlyBalances[-1]
    verdict = sustainability_for(final_balance, params.initialInvestment)

    return SWPSummary(
        totalWithdrawals=params.monthlyWithdrawal * params.duration * 12,
        finalBalance=final_balance,
        capitalPreservationPct=round(final_balance / params.initialInvestment * 100, 1),
        yearlyWithdrawalRatePct=round(params.monthlyWithdrawal * 12 / params.initialInvestment * 100, 1),
        yearsOfCoverage=years_of_coverage(projection.yearlyBalances),
        sustainability=verdict,
        advice=SUSTAINABILITY_ADVICE[verdict],
    )


__all__ = [
    "Sustainability",
    "SIPSummary",
    "SWPSummary",
    "annualized_return_pct",
    "summarize_sip",
    "summarize_swp",
    "years_of_coverage",
    "sustainability_for",
]
