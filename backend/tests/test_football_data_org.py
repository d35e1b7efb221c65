"""
Unit Tests for the Football-Data.org data source

HTTP is served by httpx.MockTransport, so no network access is needed.
"""

import asyncio

import httpx
import pytest

from src.domain.entities.entities import MatchStatus
from src.domain.exceptions import (
    ApiKeyNotConfiguredException,
    DataSourceException,
    InvalidApiKeyException,
    RateLimitExceededException,
)
from src.infrastructure.data_sources.football_data_org import (
    FootballDataOrgConfig,
    FootballDataOrgSource,
    map_status,
    round_label,
)


API_KEY = "abcdef1234567890wxyz"

MATCH_PAYLOAD = {
    "id": 436001,
    "utcDate": "2024-03-02T15:00:00Z",
    "status": "FINISHED",
    "matchday": 26,
    "stage": "REGULAR_SEASON",
    "competition": {"id": 2021, "name": "Premier League", "code": "PL", "emblem": "https://crests/pl.png"},
    "homeTeam": {"id": 57, "name": "Arsenal FC", "shortName": "Arsenal", "crest": "https://crests/57.png"},
    "awayTeam": {"id": 61, "name": "Chelsea FC", "shortName": "Chelsea", "crest": "https://crests/61.png"},
    "score": {"fullTime": {"home": 2, "away": 1}},
}


def make_source(handler, api_key=API_KEY, **config) -> FootballDataOrgSource:
    return FootballDataOrgSource(
        config=FootballDataOrgConfig(api_key=api_key, base_url="https://api.test/v4", **config),
        transport=httpx.MockTransport(handler),
    )


def json_handler(payload, status_code=200, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)
    return handler


class TestHelpers:

    @pytest.mark.parametrize(
        "vendor,expected",
        [
            ("FINISHED", MatchStatus.FINISHED),
            ("AWARDED", MatchStatus.FINISHED),
            ("IN_PLAY", MatchStatus.ONGOING),
            ("PAUSED", MatchStatus.ONGOING),
            ("TIMED", MatchStatus.SCHEDULED),
            ("POSTPONED", MatchStatus.SCHEDULED),
        ],
    )
    def test_map_status(self, vendor, expected):
        assert map_status(vendor) == expected

    def test_round_label(self):
        assert round_label("REGULAR_SEASON", 12) == "Matchday 12"
        assert round_label(None, 3) == "Matchday 3"
        assert round_label("QUARTER_FINALS", None) == "QUARTER FINALS"
        assert round_label(None, None) == ""

    def test_config_reads_environment(self, monkeypatch):
        monkeypatch.delenv("FOOTBALL_DATA_API_KEY", raising=False)
        monkeypatch.setenv("FOOTBALL_DATA_ORG_KEY", "legacy-key")
        assert FootballDataOrgConfig().api_key == "legacy-key"

    def test_masked_api_key(self):
        source = FootballDataOrgSource(FootballDataOrgConfig(api_key=API_KEY))
        assert source.masked_api_key == "abcdef12...wxyz"
        assert FootballDataOrgSource(FootballDataOrgConfig(api_key="short")).masked_api_key == "sh..."
        assert FootballDataOrgSource(FootballDataOrgConfig(api_key="")).masked_api_key is None


class TestRequests:
    """Tests for authentication and error mapping."""

    @pytest.mark.asyncio
    async def test_sends_auth_header_and_drops_empty_params(self):
        seen = []
        source = make_source(json_handler({"matches": []}, seen=seen))

        await source.get_team_matches(57, date_from="2024-01-01")

        request = seen[0]
        assert request.headers["X-Auth-Token"] == API_KEY
        assert request.url.path == "/v4/teams/57/matches"
        assert dict(request.url.params) == {"dateFrom": "2024-01-01"}

    @pytest.mark.asyncio
    async def test_missing_key_raises_without_request(self):
        seen = []
        source = make_source(json_handler({}, seen=seen), api_key="")

        with pytest.raises(ApiKeyNotConfiguredException):
            await source.get_matches()
        assert seen == []

    @pytest.mark.asyncio
    async def test_unauthorized(self):
        source = make_source(json_handler({"message": "bad token"}, status_code=401))

        with pytest.raises(InvalidApiKeyException) as exc_info:
            await source.get_competitions()
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Unauthorized: Invalid API key"

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        source = make_source(json_handler({}, status_code=429))

        with pytest.raises(RateLimitExceededException) as exc_info:
            await source.get_matches()
        assert exc_info.value.retry_after_seconds == 60

    @pytest.mark.asyncio
    async def test_server_error(self):
        source = make_source(json_handler({}, status_code=503))

        with pytest.raises(DataSourceException) as exc_info:
            await source.get_matches()
        assert exc_info.value.status_code == 503
        assert exc_info.value.message.startswith("API error: 503")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DataSourceException):
            await make_source(handler).get_matches()

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>")

        with pytest.raises(DataSourceException):
            await make_source(handler).get_matches()


class TestParsing:
    """Tests for mapping vendor payloads onto entities."""

    @pytest.mark.asyncio
    async def test_parse_finished_match(self):
        source = make_source(json_handler({"matches": [MATCH_PAYLOAD]}))

        matches = await source.get_matches("2024-03-01", "2024-03-03")

        assert len(matches) == 1
        match = matches[0]
        assert match.id == 436001
        assert match.league.code == "PL"
        assert match.home_team.name == "Arsenal FC"
        assert match.away_team.short_name == "Chelsea"
        assert match.utc_date.isoformat() == "2024-03-02T15:00:00+00:00"
        assert match.status == MatchStatus.FINISHED
        assert match.round == "Matchday 26"
        assert (match.home_goals, match.away_goals) == (2, 1)

    @pytest.mark.asyncio
    async def test_competition_matches_inherit_competition(self):
        scheduled = {
            **MATCH_PAYLOAD,
            "competition": None,
            "status": "TIMED",
            "score": {"fullTime": {"home": None, "away": None}},
            "homeTeam": {"id": None, "name": None},
        }
        payload = {"competition": {"id": 2014, "name": "Primera Division", "code": "PD"}, "matches": [scheduled]}
        source = make_source(json_handler(payload))

        match = (await source.get_competition_matches("PD"))[0]

        assert match.league.name == "Primera Division"
        assert match.status == MatchStatus.SCHEDULED
        assert match.home_team.name == "TBD"
        assert match.home_goals is None

    @pytest.mark.asyncio
    async def test_malformed_matches_are_skipped(self):
        broken = {key: value for key, value in MATCH_PAYLOAD.items() if key != "utcDate"}
        source = make_source(json_handler({"matches": [broken, MATCH_PAYLOAD]}))

        matches = await source.get_matches()

        assert [m.id for m in matches] == [436001]

    @pytest.mark.asyncio
    async def test_competitions_filtered_to_supported(self):
        payload = {
            "competitions": [
                {"id": 2021, "name": "Premier League", "code": "PL"},
                {"id": 2013, "name": "Campeonato Brasileiro Série A", "code": "BSA"},
                {"id": 9999, "name": "Some Cup", "code": "XYZ"},
            ]
        }
        source = make_source(json_handler(payload))

        leagues = await source.get_competitions()

        assert [league.code for league in leagues] == ["PL", "BSA"]


class TestRateLimiter:

    @pytest.mark.asyncio
    async def test_waits_for_oldest_request_to_leave_window(self, monkeypatch):
        now = {"t": 0.0}
        waits = []

        async def fake_sleep(seconds):
            waits.append(seconds)
            now["t"] += seconds

        monkeypatch.setattr(asyncio, "sleep", fake_sleep)
        source = FootballDataOrgSource(
            FootballDataOrgConfig(api_key=API_KEY, requests_per_minute=2),
            clock=lambda: now["t"],
        )

        await source._wait_for_rate_limit()
        await source._wait_for_rate_limit()
        assert waits == []

        now["t"] = 10.0
        await source._wait_for_rate_limit()
        assert waits == [50.0]

        now["t"] = 200.0
        await source._wait_for_rate_limit()
        assert waits == [50.0]
