"""
Staggered, concurrent fan-out of the per-game joiner.
"""
import asyncio
import time

import pytest

from fakes import FakeSteamAPI, ach

from steam_profile.models import RemoteError
from steam_profile.scheduler import StaggeredStart, fan_out


def _api_with_games(appids):
    api = FakeSteamAPI()
    for appid in appids:
        api.player_achievements[appid] = [ach(f"A{appid}")]
    return api


class TestStaggeredStart:
    def test_delay_grows_with_index(self):
        s = StaggeredStart(125)
        assert s.delay(0) == 0
        assert s.delay(1) == pytest.approx(0.125)
        assert s.delay(8) == pytest.approx(1.0)

    def test_negative_interval_is_clamped(self):
        assert StaggeredStart(-5).delay(3) == 0


class TestFanOut:
    """Results are keyed by appid; failures abort the run."""

    def test_results_keyed_by_appid(self):
        api = _api_with_games([1, 2, 3])
        out = asyncio.run(fan_out(api, "765", [1, 2, 3], interval_ms=0, progress=False))
        assert sorted(out) == [1, 2, 3]
        assert out[2].achievements[0].apiname == "A2"

    def test_games_without_stats_are_left_out(self):
        api = _api_with_games([1])
        out = asyncio.run(fan_out(api, "765", [1, 2], interval_ms=0, progress=False))
        assert list(out) == [1]

    def test_empty_input_issues_no_requests(self):
        api = FakeSteamAPI()
        assert asyncio.run(fan_out(api, "765", [], progress=False)) == {}
        assert api.calls == []

    def test_joins_overlap(self):
        api = _api_with_games(range(6))
        api.latency = 0.05
        asyncio.run(fan_out(api, "765", list(range(6)), interval_ms=0, progress=False))
        assert api.max_in_flight > 1

    def test_stagger_offsets_starts_without_serializing(self):
        api = _api_with_games(range(4))
        api.latency = 0.2
        interval = 0.125
        started = time.monotonic()
        asyncio.run(fan_out(api, "765", list(range(4)), interval_ms=125, progress=False))
        elapsed = time.monotonic() - started
        assert [c[2] for c in api.called("get_player_achievements")] == [0, 1, 2, 3]
        offsets = [t - started for t in api.started_at["get_player_achievements"]]
        for i, offset in enumerate(offsets):
            assert offset >= i * interval - 0.005
        # each join takes ~0.4s; run back to back they would need ~1.6s
        assert elapsed < 1.4
        assert api.max_in_flight > 1

    def test_failure_propagates(self):
        api = _api_with_games([1, 2])
        api.fail_on["get_game_schema"] = RemoteError(403, "Forbidden", "")
        with pytest.raises(RemoteError, match="403"):
            asyncio.run(fan_out(api, "765", [1, 2], interval_ms=0, progress=False))
