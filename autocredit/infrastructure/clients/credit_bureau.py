"""Credit bureau HTTP client for fetching credit scores"""

import logging
from typing import Optional

import httpx

from autocredit.config import settings
from autocredit.domain.exceptions import CreditBureauError, InvalidInputError
from autocredit.domain.models import CreditScore
from autocredit.infrastructure.observability.logging import mask_document
from autocredit.infrastructure.observability.metrics import bureau_fetch_failures_counter

logger = logging.getLogger(__name__)


class CreditBureauClient:
    """Client for the external credit bureau score API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        fallback_score: Optional[int] = None,
    ):
        self.base_url = base_url or settings.credit_bureau_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.fallback_score = fallback_score if fallback_score is not None else settings.credit_bureau_fallback_score

    async def get_credit_score(self, document_number: str) -> CreditScore:
        """
        Fetch the current bureau score for a customer document.

        Raises:
            CreditBureauError: On timeout, HTTP errors, or invalid response,
                unless a fallback score is configured
        """
        try:
            return await self._fetch_score(document_number)
        except CreditBureauError as e:
            bureau_fetch_failures_counter.inc()
            if self.fallback_score is None:
                raise
            logger.warning(
                f"Credit bureau unavailable, using fallback score: {e}",
                extra={"customer_document": mask_document(document_number), "fallback_score": self.fallback_score},
            )
            return CreditScore(self.fallback_score)

    async def _fetch_score(self, document_number: str) -> CreditScore:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/bureau/scores",
                    params={"document_number": document_number},
                )
                response.raise_for_status()
                data = response.json()

                return CreditScore(int(data["credit_score"]))

            except httpx.TimeoutException as e:
                raise CreditBureauError(f"Credit bureau timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise CreditBureauError(f"Credit bureau error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise CreditBureauError(f"Credit bureau unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, InvalidInputError) as e:
                raise CreditBureauError(f"Invalid score data from bureau: {e}") from e
