from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import aiohttp

from .models import (
    BadgeEntry,
    DecodeError,
    FriendEntry,
    GlobalPercentage,
    OwnedGame,
    PlayerAchievement,
    PlayerSummary,
    RemoteError,
    SchemaAchievement,
    SteamLevel,
)

log = logging.getLogger(__name__)

SUMMARY_BATCH = 100


def _redact(params: Dict[str, Any]) -> Dict[str, Any]:
    return {k: ("***" if k == "key" else v) for k, v in params.items()}


class SteamAPI:
    BASE = "https://api.steampowered.com"

    def __init__(
        self,
        key: str,
        session: aiohttp.ClientSession,
        base: Optional[str] = None,
        lang: str = "en",
    ) -> None:
        self.key = key
        self.session = session
        self.base = (base or self.BASE).rstrip("/")
        self.lang = lang

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        p = {k: str(v) for k, v in params.items()}
        p["key"] = self.key
        log.debug("GET %s %s", path, _redact(p))
        async with self.session.get(f"{self.base}/{path}/", params=p) as r:
            if not 200 <= r.status < 300:
                body = await r.text()
                raise RemoteError(r.status, r.reason or "", body)
            try:
                data = await r.json(content_type=None)
            except ValueError as e:
                raise DecodeError(f"{path}: body is not JSON") from e
        if not isinstance(data, dict):
            raise DecodeError(f"{path}: response body is not a JSON object")
        return data

    @staticmethod
    def _section(data: Dict[str, Any], key: str, path: str) -> Dict[str, Any]:
        sub = data.get(key)
        if not isinstance(sub, dict):
            raise DecodeError(f"{path}: missing '{key}' object")
        return sub

    # ────────────────────────────── Identity

    async def ensure_steam64(self, id_or_url: str) -> Optional[str]:
        s = id_or_url.strip().rstrip("/")
        if s.isdigit():
            return s
        m = re.search(r"/profiles/(\d+)", s)
        if m:
            return m.group(1)
        m = re.search(r"/id/([^/?#]+)", s)
        candidate = m.group(1) if m else s.rsplit("/", 1)[-1]
        if not candidate:
            return None

        data = await self._get(
            "ISteamUser/ResolveVanityURL/v0001", {"vanityurl": candidate}
        )
        response = data.get("response", {})
        if response.get("success") == 1 and response.get("steamid"):
            return str(response["steamid"])
        return None

    async def get_player_summaries(self, ids: List[str]) -> List[PlayerSummary]:
        path = "ISteamUser/GetPlayerSummaries/v0002"
        out: List[PlayerSummary] = []
        for i in range(0, len(ids), SUMMARY_BATCH):
            sub = ids[i : i + SUMMARY_BATCH]
            data = await self._get(path, {"steamids": ",".join(sub)})
            players = self._section(data, "response", path).get("players", [])
            out.extend(PlayerSummary.from_json(p) for p in players)
        return out

    async def get_friend_list(self, steamid: str) -> List[FriendEntry]:
        data = await self._get(
            "ISteamUser/GetFriendList/v0001",
            {"steamid": steamid, "relationship": "all"},
        )
        friends = data.get("friendslist", {}).get("friends", [])
        return [FriendEntry.from_json(f) for f in friends]

    async def get_steam_level(self, steamid: str) -> int:
        path = "IPlayerService/GetSteamLevel/v1"
        data = await self._get(path, {"steamid": steamid})
        return SteamLevel.from_json(self._section(data, "response", path)).player_level

    async def get_badges(self, steamid: str) -> List[BadgeEntry]:
        path = "IPlayerService/GetBadges/v1"
        data = await self._get(path, {"steamid": steamid})
        badges = self._section(data, "response", path).get("badges", [])
        return [BadgeEntry.from_json(b) for b in badges]

    async def get_owned_games(self, steamid: str) -> List[OwnedGame]:
        path = "IPlayerService/GetOwnedGames/v0001"
        data = await self._get(
            path,
            {
                "steamid": steamid,
                "include_appinfo": "true",
                "include_played_free_games": "true",
            },
        )
        games = self._section(data, "response", path).get("games", [])
        return [OwnedGame.from_json(g) for g in games]

    # ────────────────────────────── Per-game stats

    async def get_player_achievements(
        self, steamid: str, appid: int
    ) -> Optional[List[PlayerAchievement]]:
        data = await self._get(
            "ISteamUserStats/GetPlayerAchievements/v0001",
            {"steamid": steamid, "appid": appid, "l": self.lang},
        )
        achievements = data.get("playerstats", {}).get("achievements")
        if achievements is None:
            return None
        return [PlayerAchievement.from_json(a) for a in achievements]

    async def get_global_percentages(self, appid: int) -> List[GlobalPercentage]:
        data = await self._get(
            "ISteamUserStats/GetGlobalAchievementPercentagesForApp/v0002",
            {"gameid": appid},
        )
        rows = data.get("achievementpercentages", {}).get("achievements", [])
        return [GlobalPercentage.from_json(r) for r in rows]

    async def get_game_schema(self, appid: int) -> List[SchemaAchievement]:
        data = await self._get(
            "ISteamUserStats/GetSchemaForGame/v2",
            {"appid": appid, "l": self.lang},
        )
        stats = data.get("game", {}).get("availableGameStats", {})
        return [SchemaAchievement.from_json(a) for a in stats.get("achievements", [])]
