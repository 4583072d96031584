"""
Pydantic Schemas - Data Validation Models

Defines the Pydantic schemas used throughout the assessment run:
- Patient API page envelopes and patient records
- Per-field risk scores
- Submission payload and response

Usage:
    from utils.schemas import PageEnvelope, PatientRecord

    envelope = PageEnvelope.model_validate(body)
    for raw in envelope.data or []:
        patient = PatientRecord.model_validate(raw)

Patient fields are deliberately loose: blood_pressure, temperature and age
arrive as whatever the source sends (missing, null, numbers, text) and are
only interpreted by the scoring functions.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PatientRecord(BaseModel):
    """Patient record as returned by GET /patients.

    Unknown fields are preserved. patient_id is normalised to text, and an
    empty identifier becomes None so callers can skip the record.
    """

    model_config = ConfigDict(extra="allow")

    patient_id: Optional[str] = Field(default=None, description="Unique patient identifier")
    blood_pressure: Any = Field(default=None, description="Reading in 'systolic/diastolic' form")
    temperature: Any = Field(default=None, description="Body temperature in Fahrenheit")
    age: Any = Field(default=None, description="Age in years")

    @field_validator("patient_id", mode="before")
    @classmethod
    def normalize_patient_id(cls, v: Any) -> Optional[str]:
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, (int, float)):
            v = str(v)
        if isinstance(v, str):
            # Kept exactly as issued; only blank ids count as missing
            return v if v.strip() else None
        raise ValueError("patient_id must be a string or number")


class Pagination(BaseModel):
    """Pagination block of a page envelope. Only hasNext is consumed."""

    model_config = ConfigDict(extra="allow")

    hasNext: bool = Field(default=False, description="Whether another page follows")

    @field_validator("hasNext", mode="before")
    @classmethod
    def null_means_last_page(cls, v: Any) -> Any:
        return False if v is None else v


class PageEnvelope(BaseModel):
    """Envelope of GET /patients responses.

    {
        "data": [{...}, ...],
        "pagination": {"page": 1, "limit": 20, "hasNext": true, ...}
    }
    """

    model_config = ConfigDict(extra="allow")

    data: Optional[list[Any]] = Field(default=None)
    pagination: Optional[Pagination] = Field(default=None)

    @field_validator("data", mode="before")
    @classmethod
    def non_list_data_is_empty(cls, v: Any) -> Any:
        return v if isinstance(v, list) else None

    @property
    def has_next(self) -> bool:
        return self.pagination is not None and self.pagination.hasNext


class ScoreResult(BaseModel):
    """Contribution of one patient field to the total risk score."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(default=0, ge=0)
    is_invalid: bool = Field(default=False)

    @classmethod
    def invalid(cls) -> "ScoreResult":
        return cls(score=0, is_invalid=True)


class AssessmentPayload(BaseModel):
    """Body of POST /submit-assessment. Lists are sorted and unique."""

    high_risk_patients: list[str] = Field(default_factory=list)
    fever_patients: list[str] = Field(default_factory=list)
    data_quality_issues: list[str] = Field(default_factory=list)


class SubmissionResult(BaseModel):
    """Response of POST /submit-assessment, kept verbatim.

    {"success": true, "message": "...", "results": {"score": 91.5, ...}}
    """

    model_config = ConfigDict(extra="allow")

    success: bool = Field(default=False)
    message: Optional[str] = Field(default=None)
    results: Optional[dict[str, Any]] = Field(default=None)

    @property
    def score(self) -> Any:
        return (self.results or {}).get("score")
