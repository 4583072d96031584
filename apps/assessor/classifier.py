"""
Patient Classifier - Alert Category Aggregation

Scores every patient record and sorts identifiers into three overlapping
alert categories:
- high_risk: total risk score >= high_risk_threshold
- fever: valid temperature >= fever_threshold
- data_quality_issues: at least one field missing or malformed

Categories are sets, so a patient seen twice (e.g. duplicated across pages)
is reported once. Payload lists are sorted for reproducible submissions.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from apps.assessor.scoring import (
    calculate_age_risk,
    calculate_bp_risk,
    calculate_temp_risk,
    parse_number,
)
from utils.schemas import AssessmentPayload, PatientRecord

logger = logging.getLogger(__name__)

HIGH_RISK_THRESHOLD = 4
FEVER_THRESHOLD = 99.6


@dataclass
class AlertCategories:
    """Identifier sets built by one classification pass."""

    high_risk: set[str] = field(default_factory=set)
    fever: set[str] = field(default_factory=set)
    data_quality_issues: set[str] = field(default_factory=set)
    skipped: int = 0

    def to_payload(self) -> AssessmentPayload:
        return AssessmentPayload(
            high_risk_patients=sorted(self.high_risk),
            fever_patients=sorted(self.fever),
            data_quality_issues=sorted(self.data_quality_issues),
        )


def _to_patient(raw: Any) -> Optional[PatientRecord]:
    if isinstance(raw, PatientRecord):
        return raw
    if not isinstance(raw, dict):
        logger.warning("Skipping non-object patient record: %r", raw)
        return None
    try:
        return PatientRecord.model_validate(raw)
    except ValidationError as e:
        logger.warning(
            "Skipping patient record with unusable identifier",
            extra={"record": raw, "error": str(e).split("\n")[0]},
        )
        return None


def classify_patient(
    patient: PatientRecord,
    categories: AlertCategories,
    high_risk_threshold: int = HIGH_RISK_THRESHOLD,
    fever_threshold: float = FEVER_THRESHOLD,
) -> None:
    """Score one patient and add its identifier to the matching categories."""
    patient_id = patient.patient_id
    if patient_id is None:
        raise ValueError("patient record has no patient_id")

    bp_result = calculate_bp_risk(patient.blood_pressure)
    temp_result = calculate_temp_risk(patient.temperature)
    age_result = calculate_age_risk(patient.age)

    if bp_result.is_invalid or temp_result.is_invalid or age_result.is_invalid:
        categories.data_quality_issues.add(patient_id)

    total_score = bp_result.score + temp_result.score + age_result.score
    if total_score >= high_risk_threshold:
        categories.high_risk.add(patient_id)

    # Fever is decided on the raw reading, not on the temperature score bucket
    if not temp_result.is_invalid:
        temperature = parse_number(patient.temperature)
        if temperature is not None and temperature >= fever_threshold:
            categories.fever.add(patient_id)

    logger.debug(
        "Scored patient %s: bp=%d temp=%d age=%d total=%d",
        patient_id,
        bp_result.score,
        temp_result.score,
        age_result.score,
        total_score,
    )


def classify_patients(
    records: Iterable[Any],
    high_risk_threshold: int = HIGH_RISK_THRESHOLD,
    fever_threshold: float = FEVER_THRESHOLD,
) -> AlertCategories:
    """
    Classify raw patient records into alert categories.

    Records without a usable patient_id are logged and skipped; they never
    abort the run.

    Args:
        records: Raw records (dicts) or PatientRecord instances
        high_risk_threshold: Minimum total score for the high-risk category
        fever_threshold: Minimum temperature for the fever category

    Returns:
        AlertCategories with deduplicated identifier sets
    """
    categories = AlertCategories()

    for raw in records:
        patient = _to_patient(raw)
        if patient is None:
            categories.skipped += 1
            continue

        if patient.patient_id is None:
            logger.warning("Skipping a record with no patient_id: %r", raw)
            categories.skipped += 1
            continue

        classify_patient(patient, categories, high_risk_threshold, fever_threshold)

    logger.info(
        "Patient processing complete: high_risk=%d, fever=%d, data_quality_issues=%d, skipped=%d",
        len(categories.high_risk),
        len(categories.fever),
        len(categories.data_quality_issues),
        categories.skipped,
    )
    return categories
