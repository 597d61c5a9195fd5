from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FormFillRequest(BaseModel):
    """One form-fill unit of work: which benefit document, filled for which contact."""

    model_config = ConfigDict(frozen=True)

    contact_id: str = Field(
        min_length=1,
        max_length=64,
        description="Opaque contact identifier.",
        examples=["C1"],
    )
    benefit_id: str = Field(
        min_length=1,
        max_length=64,
        description="Opaque benefit document identifier.",
        examples=["B1"],
    )


class FormFillBatchIn(BaseModel):
    requests: list[FormFillRequest] = Field(
        min_length=1,
        max_length=100,
        description="Processed strictly in order; the first failure aborts the whole batch.",
    )


class FormFillBatchOut(BaseModel):
    urls: list[str] = Field(
        description="Public download URL per request, in the same order as the input.",
        examples=[["http://localhost:8000/public/files/3q2-abc"]],
    )
