"""Data contracts for the SIP calculator endpoint."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from sipswp.core.breakdown import SIPYearRow
from sipswp.core.projection import SIPInput
from sipswp.core.summary import SIPSummary
from sipswp.schemas.history import SIPParams, SIPRecord, SIPResults


class SIPRequest(BaseModel):
    """Calculator form input. Numeric strings are accepted as typed."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    monthlyInvestment: float = Field(..., gt=0, description="Amount invested at the end of every month.")
    returnRate: float = Field(..., ge=0, le=100, description="Expected annual return, percent.")
    duration: int = Field(..., ge=1, le=50, description="Investment horizon in years.")
    inflationRate: float = Field(..., ge=0, le=50, description="Expected annual inflation, percent.")
    save: bool = Field(False, description="Append the result to the calculation history.")

    def to_input(self) -> SIPInput:
        return SIPInput(
            monthlyInvestment=self.monthlyInvestment,
            returnRate=self.returnRate,
            duration=self.duration,
            inflationRate=self.inflationRate,
        )

    def to_params(self) -> SIPParams:
        return SIPParams(**self.model_dump(exclude={"save"}))


class SIPResponse(BaseModel):
    years: List[str]
    yearlyBalances: List[int]
    nominalYearlyBalances: List[int]
    breakdown: List[SIPYearRow]
    summary: SIPSummary
    record: Optional[SIPRecord] = None
    notice: Optional[str] = None

    def to_results(self) -> SIPResults:
        return SIPResults(
            totalInvestment=self.summary.totalInvestment,
            expectedReturns=self.summary.expectedReturns,
            totalValue=self.summary.totalValue,
            yearlyData=self.breakdown,
        )
