"""Tests for alert category aggregation."""

import pytest

from apps.assessor.classifier import AlertCategories, classify_patient, classify_patients
from utils.schemas import PatientRecord


def test_high_risk_fever_patient():
    categories = classify_patients(
        [{"patient_id": "p1", "blood_pressure": "150/95", "temperature": 103, "age": 70}]
    )

    assert categories.high_risk == {"p1"}
    assert categories.fever == {"p1"}
    assert categories.data_quality_issues == set()


def test_data_quality_patient():
    categories = classify_patients(
        [{"patient_id": "p2", "blood_pressure": "N/A", "temperature": 98, "age": 30}]
    )

    assert categories.data_quality_issues == {"p2"}
    assert categories.high_risk == set()
    assert categories.fever == set()


def test_invalid_field_counts_as_zero_toward_total():
    # bp invalid (0) + temp 2 + age 2 = 4
    categories = classify_patients(
        [{"patient_id": "p3", "blood_pressure": None, "temperature": 101.2, "age": 80}]
    )

    assert categories.high_risk == {"p3"}
    assert categories.fever == {"p3"}
    assert categories.data_quality_issues == {"p3"}


def test_total_just_below_threshold():
    # 2 + 0 + 1 = 3
    categories = classify_patients(
        [{"patient_id": "p4", "blood_pressure": "135/85", "temperature": 98.6, "age": 50}]
    )
    assert categories.high_risk == set()


def test_fever_uses_raw_reading():
    categories = classify_patients(
        [
            {"patient_id": "low", "blood_pressure": "110/70", "temperature": "99.6", "age": 20},
            {"patient_id": "high", "blood_pressure": "110/70", "temperature": 104.0, "age": 20},
            {"patient_id": "normal", "blood_pressure": "110/70", "temperature": 99.5, "age": 20},
            {"patient_id": "broken", "blood_pressure": "110/70", "temperature": "TEMP_ERROR", "age": 20},
        ]
    )

    assert categories.fever == {"low", "high"}
    assert categories.data_quality_issues == {"broken"}


def test_records_without_identifier_are_skipped():
    categories = classify_patients(
        [
            {"blood_pressure": "150/95", "temperature": 103, "age": 70},
            {"patient_id": "", "blood_pressure": "150/95", "temperature": 103, "age": 70},
            {"patient_id": None, "age": 70},
            {"patient_id": ["x"], "age": 70},
            None,
            "garbage",
            {"patient_id": "ok", "blood_pressure": "150/95", "temperature": 103, "age": 70},
        ]
    )

    assert categories.high_risk == {"ok"}
    assert categories.skipped == 6


def test_duplicate_records_are_reported_once():
    record = {"patient_id": "DEMO001", "blood_pressure": "INVALID", "temperature": 102, "age": 70}
    categories = classify_patients([record, dict(record), record])

    payload = categories.to_payload()
    assert payload.high_risk_patients == ["DEMO001"]
    assert payload.fever_patients == ["DEMO001"]
    assert payload.data_quality_issues == ["DEMO001"]


def test_payload_is_sorted_regardless_of_input_order():
    ids = ["DEMO010", "DEMO002", "DEMO030", "DEMO001"]
    records = [{"patient_id": pid, "blood_pressure": None, "temperature": None, "age": None} for pid in ids]

    forward = classify_patients(records).to_payload()
    backward = classify_patients(list(reversed(records))).to_payload()

    assert forward.data_quality_issues == sorted(ids)
    assert forward == backward


def test_numeric_identifiers_are_normalised():
    categories = classify_patients([{"patient_id": 42, "blood_pressure": "x", "temperature": 98, "age": 20}])
    assert categories.data_quality_issues == {"42"}


def test_thresholds_are_configurable():
    record = {"patient_id": "p1", "blood_pressure": "125/70", "temperature": 100.0, "age": 45}

    default = classify_patients([record])
    strict = classify_patients([record], high_risk_threshold=3, fever_threshold=100.5)

    assert default.high_risk == set()
    assert default.fever == {"p1"}
    assert strict.high_risk == {"p1"}
    assert strict.fever == set()


def test_identifiers_are_kept_as_received():
    categories = classify_patients(
        [
            {"patient_id": " p1", "blood_pressure": "bad", "temperature": 98, "age": 20},
            {"patient_id": "p1", "blood_pressure": "bad", "temperature": 98, "age": 20},
            {"patient_id": "   ", "blood_pressure": "bad", "temperature": 98, "age": 20},
        ]
    )

    assert categories.data_quality_issues == {" p1", "p1"}
    assert categories.skipped == 1


def test_classify_patient_requires_identifier():
    with pytest.raises(ValueError):
        classify_patient(PatientRecord(patient_id=None), AlertCategories())


def test_extra_fields_are_preserved():
    patient = PatientRecord.model_validate({"patient_id": "p1", "name": "TestPatient, John", "gender": "M"})
    assert patient.model_extra == {"name": "TestPatient, John", "gender": "M"}
