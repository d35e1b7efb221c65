"""
Unit Tests for the Prediction Cache

Tests expiry, statistics and both backing stores.
"""

import fnmatch
import json
from dataclasses import replace

import pytest

from src.domain.entities.entities import CachedPrediction, TeamStats
from src.domain.services.prediction_service import PredictionService
from src.infrastructure.cache.prediction_cache import PredictionCache
from src.infrastructure.cache.prediction_store import (
    InMemoryPredictionStore,
    RedisPredictionStore,
)
from src.infrastructure.cache.serialization import (
    cached_prediction_from_dict,
    cached_prediction_to_dict,
)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeRedisClient:
    """Dict-backed stand-in for RedisClient that round-trips values through JSON."""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    @property
    def is_connected(self) -> bool:
        return True

    def get(self, key):
        value = self.data.get(key)
        return json.loads(value) if value else None

    def set(self, key, value, ttl_seconds=None):
        self.data[key] = json.dumps(value, default=str)
        self.ttls[key] = ttl_seconds
        return True

    def delete(self, key):
        return self.data.pop(key, None) is not None

    def keys(self, pattern="*"):
        return [k for k in self.data if fnmatch.fnmatch(k, pattern)]


def _stats(name: str, wins: int) -> TeamStats:
    return TeamStats(
        team_name=name,
        matches_played=10,
        wins=wins,
        draws=2,
        losses=8 - wins,
        goals_scored=wins * 2 + 2,
        goals_conceded=16 - wins * 2,
        avg_goals_scored=(wins * 2 + 2) / 10,
        avg_goals_conceded=(16 - wins * 2) / 10,
        scoring_consistency=80.0,
        avg_corners_for=5.5,
        avg_yellow_cards=2.2,
    )


@pytest.fixture
def prediction():
    service = PredictionService()
    home, away = _stats("Arsenal", 6), _stats("Chelsea", 3)
    result = service.predict_match(home, away)
    return replace(
        result,
        home_stats_display=service.build_team_stats_display(home, is_home=True),
        away_stats_display=service.build_team_stats_display(away, is_home=False),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return PredictionCache(InMemoryPredictionStore(), ttl_seconds=3600, clock=clock)


class TestPredictionCache:
    """Tests for expiry and statistics."""

    def test_miss(self, cache):
        assert cache.get(1) is None

    def test_hit_within_ttl(self, cache, clock, prediction):
        cache.set(1, prediction)
        clock.now += 3600
        assert cache.get(1) == prediction

    def test_expired_entry_is_evicted(self, cache, clock, prediction):
        cache.set(1, prediction)
        clock.now += 3601

        assert cache.get(1) is None
        assert cache.stats().count == 0

    def test_entries_are_per_fixture(self, cache, prediction):
        cache.set(1, prediction)
        assert cache.get(2) is None

    def test_invalidate(self, cache, prediction):
        cache.set(1, prediction)
        assert cache.invalidate(1)
        assert not cache.invalidate(1)
        assert cache.get(1) is None

    def test_stats_report_oldest_timestamp(self, cache, clock, prediction):
        assert cache.stats().count == 0
        assert cache.stats().oldest_timestamp is None

        first_written = clock.now
        cache.set(1, prediction)
        clock.now += 10
        cache.set(2, prediction)

        stats = cache.stats()
        assert stats.count == 2
        assert stats.oldest_timestamp == first_written

    def test_writes_sweep_out_expired_fixtures(self, cache, clock, prediction):
        for fixture_id in range(1000):
            cache.set(fixture_id, prediction)

        clock.now += 36000
        cache.set(5000, prediction)

        stats = cache.stats()
        assert stats.count == 1
        assert stats.oldest_timestamp == clock.now
        assert len(cache.store.items()) == 1

    def test_stats_ignore_expired_entries(self, cache, clock, prediction):
        cache.set(1, prediction)
        clock.now += 3000
        cache.set(2, prediction)
        clock.now += 601

        stats = cache.stats()
        assert stats.count == 1
        assert stats.oldest_timestamp == clock.now - 601
        assert cache.get(2) == prediction

    def test_purge_expired_reports_removed_count(self, cache, clock, prediction):
        cache.set(1, prediction)
        cache.set(2, prediction)
        clock.now += 3601
        assert cache.purge_expired() == 2
        assert cache.purge_expired() == 0

    def test_clear(self, cache, prediction):
        cache.set(1, prediction)
        cache.set(2, prediction)
        cache.clear()
        assert cache.stats().count == 0

    def test_ttl_from_environment(self, monkeypatch):
        monkeypatch.setenv("PREDICTION_CACHE_TTL_SECONDS", "120")
        assert PredictionCache(InMemoryPredictionStore()).ttl_seconds == 120


class TestRedisPredictionStore:
    """Tests for the Redis-backed store through a JSON round trip."""

    @pytest.fixture
    def client(self):
        return FakeRedisClient()

    @pytest.fixture
    def store(self, client):
        return RedisPredictionStore(client)

    def test_set_and_get(self, store, client, prediction):
        store.set("predictions:1", CachedPrediction(prediction=prediction, timestamp=100.0))

        assert "soccer_predictions:predictions:1" in client.data
        entry = store.get("predictions:1")
        assert entry.timestamp == 100.0
        assert entry.prediction == prediction
        assert entry.prediction.home_stats_display.name == "Arsenal"

    def test_unreadable_entry_is_discarded(self, store, client):
        client.data["soccer_predictions:predictions:9"] = json.dumps({"prediction": {}})

        assert store.get("predictions:9") is None
        assert "soccer_predictions:predictions:9" not in client.data

    def test_clear_only_touches_prefix(self, store, client, prediction):
        client.data["matches:7:0"] = json.dumps({"success": True})
        store.set("predictions:1", CachedPrediction(prediction=prediction, timestamp=1.0))

        store.clear()

        assert list(client.data) == ["matches:7:0"]

    def test_values(self, store, prediction):
        store.set("predictions:1", CachedPrediction(prediction=prediction, timestamp=1.0))
        store.set("predictions:2", CachedPrediction(prediction=prediction, timestamp=2.0))

        assert sorted(e.timestamp for e in store.values()) == [1.0, 2.0]

    def test_cache_over_redis_store(self, store, clock, prediction):
        cache = PredictionCache(store, ttl_seconds=60, clock=clock)
        cache.set(5, prediction)

        assert cache.get(5) == prediction
        clock.now += 61
        assert cache.get(5) is None

    def test_cache_hands_expiry_window_to_redis(self, store, client, clock, prediction):
        cache = PredictionCache(store, ttl_seconds=90, clock=clock)
        cache.set(5, prediction)

        assert client.ttls["soccer_predictions:predictions:5"] == 90

    def test_items_strip_prefix(self, store, prediction):
        store.set("predictions:3", CachedPrediction(prediction=prediction, timestamp=3.0))
        assert [key for key, _ in store.items()] == ["predictions:3"]


class TestSerialization:

    def test_created_at_is_iso_string(self, prediction):
        data = cached_prediction_to_dict(CachedPrediction(prediction=prediction, timestamp=1.0))
        assert isinstance(data["prediction"]["created_at"], str)
        assert data["prediction"]["corners"]["range"] == {
            "min": prediction.corners.range.min,
            "max": prediction.corners.range.max,
        }

    def test_restores_creation_time(self, prediction):
        data = json.loads(json.dumps(cached_prediction_to_dict(CachedPrediction(prediction, 1.0))))
        restored = cached_prediction_from_dict(data)
        assert restored.prediction.created_at == prediction.created_at
        assert restored.prediction.h2h_display is None
