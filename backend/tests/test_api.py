"""
Unit Tests for API Endpoints

Tests the FastAPI routes, response caching and error mapping. Data sources
are replaced through dependency overrides.
"""

import random
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.api import dependencies
from src.api.main import app
from src.application.use_cases.generate_prediction_use_case import GeneratePredictionUseCase
from src.application.use_cases.use_cases import DataSources, GetHeadToHeadUseCase, GetTeamStatsUseCase
from src.domain.entities.entities import Highlight, HighlightVideo
from src.domain.exceptions import (
    ApiKeyNotConfiguredException,
    DataSourceException,
    InvalidApiKeyException,
    RateLimitExceededException,
)
from src.domain.services.prediction_service import PredictionService
from src.domain.services.statistics_service import StatisticsService
from src.infrastructure.cache.cache_service import CacheService
from src.infrastructure.cache.prediction_cache import PredictionCache
from src.infrastructure.cache.prediction_store import InMemoryPredictionStore
from src.infrastructure.cache.redis_client import RedisClient
from src.infrastructure.data_sources.football_data_org import FootballDataOrgConfig, FootballDataOrgSource
from src.infrastructure.data_sources.scorebat import ScoreBatSource
from tests.factories import PREMIER_LEAGUE, make_match


@pytest.fixture
def football_data():
    return AsyncMock()


@pytest.fixture
def scorebat():
    source = ScoreBatSource()
    source.get_highlights = AsyncMock(return_value=[])
    return source


@pytest.fixture
def response_cache():
    return CacheService(redis_client=RedisClient(enabled=False))


@pytest.fixture
def prediction_cache():
    return PredictionCache(InMemoryPredictionStore(), ttl_seconds=3600)


@pytest.fixture
def client(football_data, scorebat, response_cache, prediction_cache):
    """Create test client wired to mocked data sources."""
    data_sources = DataSources(football_data_org=football_data, scorebat=scorebat)
    statistics_service = StatisticsService(rng=random.Random(5))

    def prediction_use_case():
        return GeneratePredictionUseCase(
            team_stats_use_case=GetTeamStatsUseCase(data_sources, statistics_service),
            head_to_head_use_case=GetHeadToHeadUseCase(data_sources, statistics_service),
            prediction_service=PredictionService(),
            statistics_service=statistics_service,
            prediction_cache=prediction_cache,
        )

    app.dependency_overrides[dependencies.get_data_sources] = lambda: data_sources
    app.dependency_overrides[dependencies.get_response_cache] = lambda: response_cache
    app.dependency_overrides[dependencies.get_prediction_cache] = lambda: prediction_cache
    app.dependency_overrides[dependencies.get_statistics_service] = lambda: statistics_service
    app.dependency_overrides[dependencies.get_generate_prediction_use_case] = prediction_use_case
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert "timestamp" in data

    def test_cache_status(self, client):
        response = client.get("/cache/status")
        assert response.status_code == 200

        data = response.json()
        assert data["redis_connected"] is False
        assert "cached_predictions_count" in data
        assert data["response_cache"]["backend"] == "memory"


class TestRootEndpoint:

    def test_root_returns_api_info(self, client):
        response = client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert data["name"] == "Football Fixtures & Match Prediction API"
        assert "predictions" in data["endpoints"]


class TestMatchesEndpoints:
    """Tests for matches endpoints."""

    def test_get_matches(self, client, football_data):
        football_data.get_competition_matches.return_value = [make_match(1, 57, 61, 2, 1)]

        response = client.get("/api/v1/matches", params={"days_back": 3})
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is True
        assert data["count"] > 0
        match = data["matches"][0]
        assert match["status"] == "Finished"
        assert match["home_team"]["id"] == 57
        assert match["home_goals"] == 2

    def test_matches_are_cached(self, client, football_data):
        football_data.get_competition_matches.return_value = [make_match(1, 57, 61, 2, 1)]

        client.get("/api/v1/matches")
        calls = football_data.get_competition_matches.await_count
        response = client.get("/api/v1/matches")

        assert response.status_code == 200
        assert football_data.get_competition_matches.await_count == calls

    def test_days_back_out_of_range(self, client):
        assert client.get("/api/v1/matches", params={"days_back": 31}).status_code == 422

    def test_rate_limit_maps_to_429(self, client, football_data):
        football_data.get_competition_matches.side_effect = RateLimitExceededException()
        football_data.get_matches.side_effect = RateLimitExceededException()

        response = client.get("/api/v1/matches")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        data = response.json()
        assert data["error"] == "rate_limit_exceeded"
        assert data["details"]["retry_after_seconds"] == 60

    def test_missing_api_key_maps_to_503(self, client, football_data):
        error = ApiKeyNotConfiguredException("API key not configured")
        football_data.get_competition_matches.side_effect = error
        football_data.get_matches.side_effect = error

        response = client.get("/api/v1/matches")

        assert response.status_code == 503
        assert response.json()["error"] == "api_key_not_configured"

    def test_live_matches(self, client, football_data):
        football_data.get_matches.return_value = [
            make_match(1, 57, 61, 1, 1, vendor_status="IN_PLAY"),
            make_match(2, 62, 63, 0, 2),
        ]

        response = client.get("/api/v1/matches/live")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["matches"][0]["status"] == "Ongoing"


class TestLeaguesEndpoints:

    def test_get_leagues(self, client, football_data):
        football_data.get_competitions.return_value = [PREMIER_LEAGUE]

        response = client.get("/api/v1/leagues")

        assert response.status_code == 200
        assert response.json()["leagues"][0]["code"] == "PL"

    def test_invalid_key_maps_to_502(self, client, football_data):
        football_data.get_competitions.side_effect = InvalidApiKeyException(
            "Unauthorized: Invalid API key", status_code=401
        )

        response = client.get("/api/v1/leagues")

        assert response.status_code == 502
        data = response.json()
        assert data["error"] == "upstream_error"
        assert data["details"]["upstream_status"] == 401


class TestStatisticsEndpoints:

    def test_team_stats(self, client, football_data):
        football_data.get_team_matches.return_value = [
            make_match(1, 57, 61, 2, 0, home_name="Arsenal FC"),
            make_match(2, 62, 57, 1, 1, days=7, away_name="Arsenal FC"),
        ]

        response = client.get("/api/v1/team-stats", params={"team_id": 57})

        assert response.status_code == 200
        data = response.json()
        assert data["team_name"] == "Arsenal FC"
        assert data["matches_played"] == 2
        assert data["goal_difference"] == 2
        assert data["home"]["win_rate"] == 100
        assert data["estimated_extras"] is True

    def test_team_stats_requires_team_id(self, client):
        assert client.get("/api/v1/team-stats").status_code == 422

    def test_head_to_head(self, client, football_data):
        football_data.get_team_matches.return_value = [
            make_match(1, 57, 61, 2, 0),
            make_match(2, 61, 57, 3, 1, days=7),
        ]

        response = client.get("/api/v1/head-to-head", params={"home_team_id": 57, "away_team_id": 61})

        assert response.status_code == 200
        data = response.json()
        assert data["matches_played"] == 2
        assert (data["home_wins"], data["away_wins"]) == (1, 1)
        assert data["avg_goals"] == 3.0
        assert len(data["recent_matches"]) == 2


class TestHighlightsEndpoints:

    @pytest.fixture
    def feed(self, scorebat):
        scorebat.get_highlights.return_value = [
            Highlight(
                title="Arsenal - Chelsea",
                home_name="Arsenal",
                away_name="Chelsea",
                videos=(HighlightVideo("Highlights", "<iframe 1>"),),
            )
        ]

    def test_get_highlights(self, client, feed):
        response = client.get("/api/v1/highlights")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["highlights"][0]["embed_url"] == "<iframe 1>"

    def test_match_highlight(self, client, feed):
        response = client.get(
            "/api/v1/highlights/match", params={"home_team": "Arsenal FC", "away_team": "Chelsea FC"}
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Arsenal - Chelsea"

    def test_match_highlight_not_found(self, client, feed):
        response = client.get(
            "/api/v1/highlights/match", params={"home_team": "Everton", "away_team": "Fulham"}
        )
        assert response.status_code == 404


class TestPredictionsEndpoints:
    """Tests for predictions endpoints."""

    def test_prediction_with_mock_stats(self, client, football_data):
        response = client.get(
            "/api/v1/predictions/436001", params={"home_team": "Arsenal", "away_team": "Chelsea"}
        )

        assert response.status_code == 200
        football_data.get_team_matches.assert_not_awaited()
        data = response.json()
        assert data["fixture_id"] == 436001
        assert data["winner"]["prediction"] in ("Home", "Draw", "Away")
        assert 0 <= data["overall_confidence"] <= 100
        assert data["combo"]["prediction"]
        assert data["team_stats"] is None

        both_score = data["scoreline"]["home"] > 0 and data["scoreline"]["away"] > 0
        assert (data["btts"]["prediction"] == "Yes") == both_score

    def test_prediction_with_real_stats(self, client, football_data):
        async def team_matches(team_id, date_from=None, date_to=None):
            return [
                make_match(1, 57, 61, 2, 1, home_name="Arsenal", away_name="Chelsea"),
                make_match(2, 57, 64, 3, 0, days=3, home_name="Arsenal"),
                make_match(3, 61, 65, 1, 1, days=4, home_name="Chelsea"),
            ]

        football_data.get_team_matches.side_effect = team_matches

        response = client.get(
            "/api/v1/predictions/7",
            params={"home_team": "Arsenal", "away_team": "Chelsea", "home_team_id": 57, "away_team_id": 61},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["team_stats"]["home"]["name"] == "Arsenal"
        assert data["h2h"]["matches_played"] == 1

    def test_prediction_requires_team_names(self, client):
        assert client.get("/api/v1/predictions/1", params={"home_team": "Arsenal"}).status_code == 422

    def test_prediction_rate_limited(self, client, football_data):
        football_data.get_team_matches.side_effect = RateLimitExceededException()

        response = client.get(
            "/api/v1/predictions/8",
            params={"home_team": "Arsenal", "away_team": "Chelsea", "home_team_id": 57, "away_team_id": 61},
        )

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"

    def test_prediction_survives_upstream_failure(self, client, football_data):
        football_data.get_team_matches.side_effect = DataSourceException("API error: 500", status_code=500)

        response = client.get(
            "/api/v1/predictions/9",
            params={"home_team": "Arsenal", "away_team": "Chelsea", "home_team_id": 57, "away_team_id": 61},
        )

        assert response.status_code == 200
        assert response.json()["team_stats"] is None

    def test_prediction_cache_stats_and_clear(self, client):
        params = {"home_team": "Arsenal", "away_team": "Chelsea"}
        first = client.get("/api/v1/predictions/10", params=params).json()
        second = client.get("/api/v1/predictions/10", params=params).json()
        assert first == second

        stats = client.get("/api/v1/predictions/cache/stats").json()
        assert stats["count"] == 1
        assert stats["oldest_timestamp"] is not None
        assert stats["ttl_seconds"] == 3600

        response = client.delete("/api/v1/predictions/cache")
        assert response.status_code == 200
        assert response.json()["success"] is True

        assert client.get("/api/v1/predictions/cache/stats").json()["count"] == 0


class TestConfigEndpoints:

    def test_api_key_status(self, client):
        app.dependency_overrides[dependencies.get_football_data_org] = lambda: FootballDataOrgSource(
            FootballDataOrgConfig(api_key="abcdef1234567890wxyz")
        )

        data = client.get("/api/v1/config/api-key").json()

        assert data["api_key_exists"] is True
        assert data["api_key_length"] == 20
        assert data["api_key_preview"] == "abcdef12...wxyz"
        assert "1234567890" not in data["api_key_preview"]

    def test_api_key_missing(self, client):
        app.dependency_overrides[dependencies.get_football_data_org] = lambda: FootballDataOrgSource(
            FootballDataOrgConfig(api_key="")
        )

        data = client.get("/api/v1/config/api-key").json()

        assert data == {
            "api_key_exists": False,
            "api_key_length": 0,
            "api_key_preview": "NOT FOUND",
            "env_var_name": "FOOTBALL_DATA_API_KEY",
        }
