"""
Assessment Job - One Complete Run

Fetches every patient page, classifies the records into alert categories
and submits the report. A failed request (non-retryable status or
exhausted retries) aborts the whole run; per-record data problems never do.

Usage:
    from apps.assessor.assessment_job import run_assessment

    result = await run_assessment()
"""

import logging
import time
from typing import Optional

import orjson

from apps.assessor.api_client import PatientApiClient
from apps.assessor.classifier import classify_patients
from utils.config import Settings, settings as default_settings
from utils.schemas import SubmissionResult

logger = logging.getLogger(__name__)


async def run_assessment(
    settings: Optional[Settings] = None,
    client: Optional[PatientApiClient] = None,
) -> SubmissionResult:
    """
    Execute fetch -> classify -> submit once.

    Args:
        settings: Settings instance, defaults to the global settings
        client: Preconfigured API client (tests inject one with fake transport)

    Returns:
        Submission response as returned by the API

    Raises:
        AssessmentError: If fetching or submitting fails unrecoverably
    """
    settings = settings or default_settings
    client = client or PatientApiClient(settings)
    start_time = time.monotonic()

    async with client:
        patients = await client.fetch_all_patients()

        categories = classify_patients(
            patients,
            high_risk_threshold=settings.HIGH_RISK_THRESHOLD,
            fever_threshold=settings.FEVER_THRESHOLD,
        )
        payload = categories.to_payload()

        logger.info(
            "Submission payload:\n%s",
            orjson.dumps(payload.model_dump(), option=orjson.OPT_INDENT_2).decode("utf-8"),
        )

        result = await client.submit_assessment(payload)

    logger.info(
        "Submission result:\n%s",
        orjson.dumps(result.model_dump(), option=orjson.OPT_INDENT_2).decode("utf-8"),
    )

    if result.success:
        logger.info("Assessment successful, final score: %s", result.score)
    else:
        logger.error("Assessment submission failed: %s", result.message)

    logger.info(
        "Assessment run complete: patients=%d, elapsed=%.3fs",
        len(patients),
        time.monotonic() - start_time,
    )
    return result
