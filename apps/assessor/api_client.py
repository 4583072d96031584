"""
Patient API Client - Resilient Fetching, Pagination and Submission

Async client for the patient assessment API built on httpx. Every request
goes through utils.retry.request_with_retry, so page fetches and the final
submission share the same backoff policy.

Usage:
    async with PatientApiClient() as client:
        patients = await client.fetch_all_patients()
        result = await client.submit_assessment(payload)

Endpoints:
- GET  /patients?page={n}&limit={size}  -> {"data": [...], "pagination": {"hasNext": bool}}
- POST /submit-assessment               -> {"success": bool, "message": str, "results": {...}}
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx
import orjson
from pydantic import ValidationError

from utils.config import Settings, settings as default_settings
from utils.errors import ConfigurationError, MalformedResponseError, PaginationLimitError
from utils.retry import request_with_retry
from utils.schemas import AssessmentPayload, PageEnvelope, SubmissionResult

logger = logging.getLogger(__name__)

PATIENTS_PATH = "/patients"
SUBMIT_PATH = "/submit-assessment"


class PatientApiClient:
    """Patient API client with exponential backoff and polite pagination."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Settings instance, defaults to the global settings
            http_client: Preconfigured httpx client (tests pass one with a MockTransport)
            sleep: Awaitable sleep used for backoff and page delays
        """
        self.settings = settings or default_settings
        self.sleep = sleep
        self._owns_client = http_client is None
        self.client: Optional[httpx.AsyncClient] = http_client

    async def connect(self) -> None:
        """Create the underlying httpx client if none was injected."""
        if not self.settings.API_KEY:
            raise ConfigurationError("API_KEY is not configured", setting="API_KEY")

        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=self.settings.API_BASE_URL,
                headers={"x-api-key": self.settings.API_KEY},
                timeout=self.settings.API_TIMEOUT,
            )

    async def close(self) -> None:
        """Close the httpx client if this instance created it."""
        if self.client is not None and self._owns_client:
            await self.client.aclose()
            self.client = None

    async def __aenter__(self) -> "PatientApiClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def fetch(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Issue one logical request with retries and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path relative to API_BASE_URL
            **kwargs: Passed through to httpx.AsyncClient.request

        Raises:
            NonRetryableHTTPError: On a non-retryable error status
            RetriesExhaustedError: When all attempts failed
        """
        if self.client is None:
            await self.connect()

        headers = {"x-api-key": self.settings.API_KEY, **kwargs.pop("headers", {})}
        description = f"{method} {self.settings.API_BASE_URL}{path}"

        return await request_with_retry(
            lambda: self.client.request(method, path, headers=headers, **kwargs),
            description=description,
            max_attempts=self.settings.FETCH_MAX_ATTEMPTS,
            initial_delay=self.settings.RETRY_INITIAL_DELAY,
            sleep=self.sleep,
        )

    async def fetch_page(self, page: int) -> PageEnvelope:
        """Fetch and validate one page of patients."""
        params = {"page": page, "limit": self.settings.PAGE_SIZE}
        body = await self.fetch("GET", PATIENTS_PATH, params=params)

        try:
            return PageEnvelope.model_validate(body)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Unexpected page envelope on page {page}: {str(e).splitlines()[0]}",
                f"GET {PATIENTS_PATH}",
            ) from e

    async def fetch_all_patients(self) -> list[dict[str, Any]]:
        """
        Fetch every page until the source reports hasNext=false.

        Pages are fetched one at a time, in order, with PAGE_DELAY seconds
        between them.

        Returns:
            All patient records in page order

        Raises:
            PaginationLimitError: If hasNext is still true after MAX_PAGES pages
        """
        patients: list[dict[str, Any]] = []
        page = 1

        logger.info("Starting to fetch patient data", extra={"page_size": self.settings.PAGE_SIZE})

        while True:
            logger.info("Fetching page %d", page)
            envelope = await self.fetch_page(page)

            if envelope.data:
                patients.extend(envelope.data)
            else:
                logger.warning("No patient data found on page %d", page)

            if not envelope.has_next:
                break

            if page >= self.settings.MAX_PAGES:
                logger.error(
                    "Page cap reached while source still reports more pages",
                    extra={"max_pages": self.settings.MAX_PAGES, "records": len(patients)},
                )
                raise PaginationLimitError(self.settings.MAX_PAGES, len(patients))

            await self.sleep(self.settings.PAGE_DELAY)
            page += 1

        logger.info("Fetched a total of %d patients across %d pages", len(patients), page)
        return patients

    async def submit_assessment(self, payload: AssessmentPayload) -> SubmissionResult:
        """
        Submit the aggregated alert lists.

        Returns:
            The parsed response; callers check success and message
        """
        logger.info(
            "Submitting assessment",
            extra={
                "high_risk": len(payload.high_risk_patients),
                "fever": len(payload.fever_patients),
                "data_quality_issues": len(payload.data_quality_issues),
            },
        )

        body = await self.fetch(
            "POST",
            SUBMIT_PATH,
            content=orjson.dumps(payload.model_dump()),
            headers={"Content-Type": "application/json"},
        )

        try:
            return SubmissionResult.model_validate(body)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Unexpected submission response: {str(e).splitlines()[0]}",
                f"POST {SUBMIT_PATH}",
            ) from e
