"""Persisted calculation records, one shape per calculator type."""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from sipswp.core.breakdown import SIPYearRow, SWPYearRow


class SIPParams(BaseModel):
    monthlyInvestment: float
    returnRate: float
    duration: int
    inflationRate: Optional[float] = None  # absent on records saved before inflation was tracked


class SWPParams(BaseModel):
    initialInvestment: float
    monthlyWithdrawal: float
    returnRate: float
    duration: int


class SIPResults(BaseModel):
    totalInvestment: float
    expectedReturns: float
    totalValue: float
    yearlyData: List[SIPYearRow] = Field(default_factory=list)


class SWPResults(BaseModel):
    totalWithdrawals: float
    finalBalance: float
    yearlyData: List[SWPYearRow] = Field(default_factory=list)


class SIPRecord(BaseModel):
    id: str
    type: Literal["SIP"] = "SIP"
    date: str = Field(..., description="ISO-8601 creation timestamp (UTC).")
    params: SIPParams
    results: SIPResults


class SWPRecord(BaseModel):
    id: str
    type: Literal["SWP"] = "SWP"
    date: str = Field(..., description="ISO-8601 creation timestamp (UTC).")
    params: SWPParams
    results: SWPResults


CalculationRecord = Annotated[Union[SIPRecord, SWPRecord], Field(discriminator="type")]

record_adapter: TypeAdapter = TypeAdapter(CalculationRecord)
history_adapter: TypeAdapter = TypeAdapter(List[CalculationRecord])
