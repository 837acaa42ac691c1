"""Data contracts for the SWP calculator endpoint."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sipswp.core.breakdown import SWPYearRow
from sipswp.core.projection import SWPInput
from sipswp.core.summary import SWPSummary
from sipswp.schemas.history import SWPParams, SWPRecord, SWPResults


class SWPRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    initialInvestment: float = Field(..., gt=0)
    monthlyWithdrawal: float = Field(..., gt=0)
    returnRate: float = Field(..., ge=0, le=100)
    duration: int = Field(..., ge=1, le=50)
    save: bool = False

    @model_validator(mode="after")
    def ensure_withdrawal_cap(self) -> "SWPRequest":
        if self.monthlyWithdrawal > self.initialInvestment / 12:
            raise ValueError("monthlyWithdrawal cannot exceed 1/12th of initialInvestment")
        return self

    def to_input(self) -> SWPInput:
        return SWPInput(
            initialInvestment=self.initialInvestment,
            monthlyWithdrawal=self.monthlyWithdrawal,
            returnRate=self.returnRate,
            duration=self.duration,
        )

    def to_params(self) -> SWPParams:
        return SWPParams(**self.model_dump(exclude={"save"}))


class SWPResponse(BaseModel):
    years: List[str]
    yearlyBalances: List[int]
    breakdown: List[SWPYearRow]
    summary: SWPSummary
    record: Optional[SWPRecord] = None
    notice: Optional[str] = None

    def to_results(self) -> SWPResults:
        return SWPResults(
            totalWithdrawals=self.summary.totalWithdrawals,
            finalBalance=self.summary.finalBalance,
            yearlyData=self.breakdown,
        )
