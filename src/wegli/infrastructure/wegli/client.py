"""weg.li API client"""

import logging
import os
from pathlib import Path
from typing import Any, List, Optional, Union

import requests

from wegli.domain.config.api import DEFAULT_API_URL
from wegli.domain.config.retry import DEFAULT_RETRY_POLICY, RateLimitPolicy, RetryPolicy
from wegli.domain.errors import DeserializationError
from wegli.domain.models.charge import Charge
from wegli.domain.models.district import District
from wegli.domain.models.export import Export
from wegli.domain.models.notice import Notice
from wegli.infrastructure.http_client import RequestDescriptor, RequestExecutor

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-KEY"


class WegliClient:
    """Client for the weg.li API: one method per resource"""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_token: Optional[str] = None,
        retry_policy: Optional[RetryPolicy] = None,
        *,
        timeout: float = 30.0,
        rate_limit: Union[RateLimitPolicy, str] = RateLimitPolicy.TERMINAL,
        session: Optional[requests.Session] = None,
        executor: Optional[RequestExecutor] = None,
    ):
        """Initialize weg.li client

        Args:
            api_url: API base URL (default: from WEGLI_API_URL env or https://www.weg.li/api)
            api_token: API key (default: from WEGLI_API_TOKEN env)
            retry_policy: Backoff settings (default: 300ms initial, 5 retries, x2).
                Pass RetryPolicy(max_retries=0) to disable retries.
            timeout: Per-request transport timeout in seconds
            rate_limit: Handling of 429/503 responses
            session: requests session to reuse
            executor: Preconfigured executor (takes precedence over timeout/rate_limit/session)
        """
        self.api_url = (api_url or os.getenv("WEGLI_API_URL") or DEFAULT_API_URL).rstrip("/")
        self.api_token = api_token or os.getenv("WEGLI_API_TOKEN")
        self.retry_policy = retry_policy if retry_policy is not None else DEFAULT_RETRY_POLICY

        if not self.api_token:
            raise ValueError(
                "weg.li API token is required. "
                "Set WEGLI_API_TOKEN environment variable or provide in config."
            )

        self.executor = executor or RequestExecutor(
            session, timeout=timeout, rate_limit=rate_limit
        )
        logger.info(f"weg.li client initialized for {self.api_url}")

    def get_notice(self, notice_token: str) -> Notice:
        """Get a single notice of the authenticated user by its token"""
        return Notice.from_json(self._get_json(f"notices/{notice_token}"))

    def get_notices(self) -> List[Notice]:
        """Get all notices of the authenticated user"""
        return Notice.list_from_json(self._get_json("notices"))

    def get_charge(self, tbnr: str) -> Charge:
        """Get a single charge by its tbnr"""
        return Charge.from_json(self._get_json(f"charges/{tbnr}"))

    def get_charges(self) -> List[Charge]:
        """Get all charges"""
        return Charge.list_from_json(self._get_json("charges"))

    def get_district(self, zip_code: str) -> District:
        """Get a single district by zip code"""
        return District.from_json(self._get_json(f"districts/{zip_code}"))

    def get_districts(self) -> List[District]:
        """Get all districts"""
        return District.list_from_json(self._get_json("districts"))

    def get_exports(self, public: bool = False) -> List[Export]:
        """Get export metadata, public ones or the authenticated user's"""
        return Export.list_from_json(self._get_json("exports/public" if public else "exports"))

    def get_user_exports(self) -> List[Export]:
        """Get metadata of exports of the authenticated user"""
        return self.get_exports(public=False)

    def get_public_exports(self) -> List[Export]:
        """Get metadata of all public exports"""
        return self.get_exports(public=True)

    def download_latest_export(self, path: Path, public: bool = False, unzip: bool = True) -> Path:
        """Download the latest notice export archive into ``path``.

        Returns:
            Path of the zip archive, or of the extracted CSV file if ``unzip``
        """
        from wegli.application.export_service import ExportService

        return ExportService(self).download_latest_export(Path(path), public=public, unzip=unzip)

    def _get_json(self, endpoint: str) -> Any:
        """GET an endpoint and decode its JSON body

        Raises:
            DeserializationError: If the body is not JSON
            WegliError: Request errors from the executor
        """
        descriptor = RequestDescriptor(
            "GET",
            f"{self.api_url}/{endpoint}",
            headers={API_KEY_HEADER: self.api_token, "Accept": "application/json"},
        )
        response = self.executor.execute(descriptor, self.retry_policy)
        try:
            return response.json()
        except ValueError as e:
            raise DeserializationError(f"invalid JSON from {endpoint}: {e}") from e
