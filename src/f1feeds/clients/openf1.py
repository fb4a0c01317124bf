"""Client for the OpenF1 live-timing API."""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter

from f1feeds._filters import build_query_params
from f1feeds._http import DEFAULT_TIMEOUT, SyncTransport
from f1feeds.api_logging import log_api_call
from f1feeds.exceptions import SourceValidationError
from f1feeds.models.openf1 import ChampionshipDriver, ChampionshipTeam, Driver, Meeting, Session

OPENF1_BASE_URL = "https://api.openf1.org/v1"


def _validate_list[T](model_type: type[T], data: Any) -> list[T]:
    """Validate a list of dicts against a Pydantic model."""
    if not isinstance(data, list):
        raise SourceValidationError(
            f"Expected a list for {model_type.__name__}, got {type(data).__name__}"
        )
    try:
        adapter = TypeAdapter(list[model_type])
        return adapter.validate_python(data)
    except Exception as exc:
        raise SourceValidationError(
            f"Failed to validate {model_type.__name__} response: {exc}"
        ) from exc


class OpenF1Client:
    """Synchronous client for the OpenF1 API.

    Usage:
        with OpenF1Client() as f1:
            drivers = f1.drivers(meeting_key="latest", team_name="McLaren")
    """

    def __init__(
        self,
        base_url: str = OPENF1_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: SyncTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self._transport = transport or SyncTransport(base_url=base_url, timeout=timeout)

    def __enter__(self) -> OpenF1Client:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP connection."""
        self._transport.close()

    def _get[T](self, endpoint: str, model: type[T], **kwargs: Any) -> list[T]:
        params = build_query_params(**kwargs)
        data = self._transport.get(endpoint, params)
        return _validate_list(model, data)

    # ── Endpoints ──────────────────────────────────────────────

    @log_api_call
    def championship_drivers(self, **kwargs: Any) -> list[ChampionshipDriver]:
        """Get driver championship standings."""
        return self._get("/championship_drivers", ChampionshipDriver, **kwargs)

    @log_api_call
    def championship_teams(self, **kwargs: Any) -> list[ChampionshipTeam]:
        """Get team championship standings."""
        return self._get("/championship_teams", ChampionshipTeam, **kwargs)

    @log_api_call
    def drivers(self, **kwargs: Any) -> list[Driver]:
        """Get driver information for a session or meeting."""
        return self._get("/drivers", Driver, **kwargs)

    @log_api_call
    def meetings(self, **kwargs: Any) -> list[Meeting]:
        """Get Grand Prix weekends and test events."""
        return self._get("/meetings", Meeting, **kwargs)

    @log_api_call
    def sessions(self, **kwargs: Any) -> list[Session]:
        """Get session information (practice, qualifying, sprint, race)."""
        return self._get("/sessions", Session, **kwargs)
