"""HTTP client for the competition API."""

import logging
from typing import Any, Optional

import httpx

from tradearena.errors import CompetitionNotFoundError, InvalidRequestError
from tradearena.models import (
    CompetitionList,
    CompetitionSummary,
    JoinResponse,
    JoinedCompetitions,
    Leaderboard,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30.0


class CompetitionApiClient:
    """
    Async client for the competition endpoints.
    
    The bearer token, when given, comes from the identity provider and
    is passed through untouched.
    """

    def __init__(
        self,
        api_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the API client.
        
        Args:
            api_url: Base URL of the Trade Arena API
            token: Bearer token for the Authorization header
            transport: Custom httpx transport (e.g. ASGITransport in tests)
        """
        self.api_url = api_url
        self.token = token
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                headers=headers,
                timeout=REQUEST_TIMEOUT,
                transport=self.transport,
            )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        competition_id: Optional[str] = None,
    ) -> Any:
        client = await self._get_client()
        response = await client.request(method, path, json=json)

        if response.status_code == 404:
            raise CompetitionNotFoundError(competition_id or path)
        if response.status_code == 400:
            raise InvalidRequestError(response.json().get("message", "invalid request"))
        
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error {e.response.status_code} for {path}: {e}")
            raise
        return response.json()

    async def list_competitions(self) -> list[CompetitionSummary]:
        data = await self._request("GET", "/v1/competitions")
        return CompetitionList.model_validate(data).competitions

    async def join(self, competition_id: str, username: str) -> int:
        """
        Join a competition.
        
        Returns:
            Participant count after the join
        """
        data = await self._request(
            "POST",
            "/v1/join",
            json={"competitionId": competition_id, "username": username},
            competition_id=competition_id,
        )
        return JoinResponse.model_validate(data).participants

    async def joined_competition_ids(self, username: str) -> list[str]:
        data = await self._request("POST", "/v1/my-competitions", json={"username": username})
        return JoinedCompetitions.model_validate(data).competitionIds

    async def leaderboard(self, competition_id: str) -> Leaderboard:
        data = await self._request(
            "GET",
            f"/v1/competitions/{competition_id}/leaderboard",
            competition_id=competition_id,
        )
        return Leaderboard.model_validate(data)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
