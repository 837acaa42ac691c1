from __future__ import annotations

import logging
import math
from typing import List

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class SIPInput(BaseModel):
    """Parameters for a systematic investment plan projection.

    Only the hard mathematical bounds live here; the soft caps the calculator
    form applies (return <= 100, duration <= 50 ...) are in schemas.sip.
    """

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    monthlyInvestment: float = Field(gt=0)
    returnRate: float = Field(ge=0)  # annual, percent
    duration: int = Field(ge=1)  # years
    inflationRate: float = Field(default=0.0, ge=0)  # annual, percent


class SWPInput(BaseModel):
    """Parameters for a systematic withdrawal plan projection."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    initialInvestment: float = Field(gt=0)
    monthlyWithdrawal: float = Field(gt=0)
    returnRate: float = Field(ge=0)
    duration: int = Field(ge=1)


class SIPProjection(BaseModel):
    # yearlyBalances is the inflation-adjusted series, nominalYearlyBalances ignores inflation
    yearlyBalances: List[int]
    nominalYearlyBalances: List[int]
    years: List[str]


class SWPProjection(BaseModel):
    yearlyBalances: List[int]
    # amount actually paid out per year; short in the depletion year, 0 afterwards
    yearlyWithdrawals: List[int]
    years: List[str]


# Balances saturate here instead of overflowing to inf on extreme rates/horizons.
MAX_BALANCE = 1e300


def saturate(value: float) -> float:
    return min(value, MAX_BALANCE)


def round_currency(value: float) -> int:
    """Round to the nearest whole currency unit, halves away from zero.

    Infinities are clamped to +/-MAX_BALANCE; NaN is rejected.
    """
    if math.isnan(value):
        raise ValueError("cannot round NaN to a currency amount")
    value = max(min(value, MAX_BALANCE), -MAX_BALANCE)
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def year_label(year: int) -> str:
    return f"Year {year}"


def monthly_rate(annual_rate_pct: float) -> float:
    return annual_rate_pct / 100 / 12


def real_annual_rate(return_rate_pct: float, inflation_rate_pct: float) -> float:
    """Inflation-adjusted annual rate (decimal) from the exact Fisher relation."""
    return (1 + return_rate_pct / 100) / (1 + inflation_rate_pct / 100) - 1


def sip_maturity_value(monthly_investment: float, return_rate_pct: float, duration: int) -> float:
    """
    Closed-form future value of an ordinary annuity:
        P * ((1 + r)^n - 1) / r,  n = duration * 12

    r == 0 is the limit P * n. Values beyond MAX_BALANCE saturate like the simulation.
    """
    rate = monthly_rate(return_rate_pct)
    months = duration * 12
    if rate == 0:
        return saturate(monthly_investment * months)
    try:
        growth = (1 + rate) ** months
    except OverflowError:
        return MAX_BALANCE
    return saturate(monthly_investment * (growth - 1) / rate)


def project_sip(params: SIPInput) -> SIPProjection:
    """
    Month-by-month SIP accumulation, summarised once per year.

    Per month (ordinary annuity, contribution credited at month end):
        balance = balance * (1 + monthly_rate) + monthlyInvestment

    Two accumulators run side by side: the nominal one at returnRate and the
    real one at the inflation-adjusted rate. Both are rounded only when a year
    is recorded; the running balances stay unrounded.
    """
    nominal_rate = monthly_rate(params.returnRate)
    real_rate = real_annual_rate(params.returnRate, params.inflationRate) / 12

    balance = 0.0
    real_balance = 0.0

    yearly_balances: List[int] = []
    nominal_yearly_balances: List[int] = []
    years: List[str] = []

    for year in range(1, params.duration + 1):
        for _ in range(12):
            balance = saturate(balance * (1 + nominal_rate) + params.monthlyInvestment)
            real_balance = saturate(real_balance * (1 + real_rate) + params.monthlyInvestment)

        nominal_yearly_balances.append(round_currency(balance))
        yearly_balances.append(round_currency(real_balance))
        years.append(year_label(year))

    logger.debug(
        "SIP projection: %s years, nominal %s, real %s",
        params.duration,
        nominal_yearly_balances[-1],
        yearly_balances[-1],
    )
    return SIPProjection(
        yearlyBalances=yearly_balances,
        nominalYearlyBalances=nominal_yearly_balances,
        years=years,
    )


def project_swp(params: SWPInput) -> SWPProjection:
    """
    Month-by-month SWP depletion, summarised once per year.

    Per month:
        balance = balance * (1 + monthly_rate) - monthlyWithdrawal
    clamped at zero. Zero is absorbing: once the pot is exhausted nothing
    grows back and later withdrawals go unfunded.
    """
    rate = monthly_rate(params.returnRate)
    balance = float(params.initialInvestment)
    depleted = False

    yearly_balances: List[int] = []
    yearly_withdrawals: List[int] = []
    years: List[str] = []

    for year in range(1, params.duration + 1):
        paid = 0.0
        for _ in range(12):
            if depleted:
                break
            grown = saturate(balance * (1 + rate))
            if grown <= params.monthlyWithdrawal:
                paid += grown
                balance = 0.0
                depleted = True
            else:
                paid += params.monthlyWithdrawal
                balance = grown - params.monthlyWithdrawal

        yearly_balances.append(round_currency(balance))
        yearly_withdrawals.append(round_currency(paid))
        years.append(year_label(year))

    logger.debug("SWP projection: %s years, final %s", params.duration, yearly_balances[-1])
    return SWPProjection(
        yearlyBalances=yearly_balances,
        yearlyWithdrawals=yearly_withdrawals,
        years=years,
    )


__all__ = [
    "SIPInput",
    "SWPInput",
    "SIPProjection",
    "SWPProjection",
    "MAX_BALANCE",
    "saturate",
    "round_currency",
    "year_label",
    "monthly_rate",
    "real_annual_rate",
    "sip_maturity_value",
    "project_sip",
    "project_swp",
]
