"""
Decision Log - Records Source.

============================================================
RESPONSIBILITY
============================================================
Fetches the full decision record set for one subject.

- fetch_decisions(subject_id) -> list of DecisionRecord
- No pagination or filtering is delegated to the backend
- Transport failures raise FetchError
- Malformed bodies raise ParseError

============================================================
PARSING POLICY
============================================================
A body that is not JSON, or not a list of objects, always
fails the fetch. Individual invalid records (bad timestamp,
wrong field types, duplicate cycle number):

- lenient (default): record dropped, warning logged
- strict: the whole fetch fails with ParseError

============================================================
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from .config import DecisionLogConfig, get_config
from .exceptions import FetchError, ParseError
from .models import DecisionRecord


logger = logging.getLogger(__name__)


# =============================================================
# SOURCE CONTRACT
# =============================================================

class DecisionSource(ABC):
    """Opaque data source serving decision records."""

    @abstractmethod
    async def fetch_decisions(self, subject_id: str) -> List[DecisionRecord]:
        """
        Fetch every decision record of a subject.

        Args:
            subject_id: Trader/strategy identifier

        Returns:
            Full record list (possibly empty)

        Raises:
            FetchError: On network or HTTP errors
            ParseError: On malformed response bodies
        """
        pass


# =============================================================
# PAYLOAD PARSING
# =============================================================

def parse_decisions(
    payload: Any,
    subject_id: Optional[str] = None,
    strict: bool = False,
) -> List[DecisionRecord]:
    """
    Convert a decoded response body into records.

    Accepts a bare list or an envelope with a "data" or
    "decisions" list.
    """
    if isinstance(payload, dict):
        for key in ("data", "decisions"):
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
        else:
            raise ParseError(
                "Response object has no 'data' or 'decisions' list",
                subject_id=subject_id,
                details={"keys": sorted(payload.keys())[:10]},
            )
    elif payload is None:
        payload = []

    if not isinstance(payload, list):
        raise ParseError(
            f"Expected a list of decision records, got {type(payload).__name__}",
            subject_id=subject_id,
        )

    records: List[DecisionRecord] = []
    seen_cycles = set()

    for position, raw in enumerate(payload):
        try:
            record = DecisionRecord.from_dict(raw)
            if record.cycle_number in seen_cycles:
                raise ParseError(
                    f"Duplicate cycle_number {record.cycle_number}",
                    field_name="cycle_number",
                    cycle_number=record.cycle_number,
                )
        except ParseError as e:
            if strict:
                raise ParseError(
                    f"Invalid record at position {position}: {e.message}",
                    subject_id=subject_id,
                    field_name=e.field_name,
                    cycle_number=e.cycle_number,
                ) from e
            logger.warning(
                f"Dropping invalid decision record for {subject_id} "
                f"at position {position}: {e}"
            )
            continue

        seen_cycles.add(record.cycle_number)
        records.append(record)

    return records


# =============================================================
# HTTP SOURCE
# =============================================================

class HttpDecisionSource(DecisionSource):
    """
    Records source backed by the trading backend's REST API.

    ============================================================
    WIRING
    ============================================================
    Endpoint: GET {api_base_url}/api/decisions?trader_id=...
    Auth: optional bearer token
    ============================================================
    """

    DECISIONS_PATH = "/api/decisions"

    def __init__(
        self,
        config: Optional[DecisionLogConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the HTTP source.

        Args:
            config: Engine configuration (defaults to global config)
            client: Shared AsyncClient; a short-lived one is created
                per request when omitted
        """
        self._config = config or get_config()
        self._client = client

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._config.api_token:
            headers["Authorization"] = f"Bearer {self._config.api_token}"
        return headers

    def _url(self) -> str:
        return self._config.api_base_url.rstrip("/") + self.DECISIONS_PATH

    async def _get(self, client: httpx.AsyncClient, subject_id: str) -> httpx.Response:
        response = await client.get(
            self._url(),
            params={"trader_id": subject_id},
            headers=self._headers(),
        )
        response.raise_for_status()
        return response

    async def fetch_decisions(self, subject_id: str) -> List[DecisionRecord]:
        try:
            if self._client is not None:
                response = await self._get(self._client, subject_id)
            else:
                async with httpx.AsyncClient(
                    timeout=self._config.request_timeout_seconds
                ) as client:
                    response = await self._get(client, subject_id)

        except httpx.HTTPStatusError as e:
            raise FetchError(
                message=f"HTTP {e.response.status_code}: {e.response.text[:200]}",
                subject_id=subject_id,
                recoverable=e.response.status_code >= 500,
                status_code=e.response.status_code,
            )
        except httpx.TimeoutException as e:
            raise FetchError(
                message=f"Request timeout: {e}",
                subject_id=subject_id,
                recoverable=True,
            )
        except httpx.RequestError as e:
            raise FetchError(
                message=f"Request error: {e}",
                subject_id=subject_id,
                recoverable=True,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ParseError(
                f"Response body is not valid JSON: {e}",
                subject_id=subject_id,
            )

        records = parse_decisions(
            payload,
            subject_id=subject_id,
            strict=self._config.strict_parsing,
        )
        logger.debug(f"Fetched {len(records)} decision records for {subject_id}")
        return records
