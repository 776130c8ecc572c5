"""
Decoding of endpoint bodies and shaping of output records.
"""
import pytest
from pydantic import ValidationError

from steam_profile.models import (
    Achievement,
    BadgeEntry,
    DecodeError,
    Friend,
    FriendEntry,
    Game,
    GlobalPercentage,
    OwnedGame,
    PlayerSummary,
    quote_normalize,
)


class TestDecode:
    """Boundary decoding into schema dataclasses."""

    def test_missing_required_field_raises(self):
        with pytest.raises(DecodeError, match="personaname"):
            PlayerSummary.from_json({"steamid": "1", "avatarfull": "x"})

    def test_wrong_type_raises(self):
        with pytest.raises(DecodeError, match="badgeid"):
            BadgeEntry.from_json(
                {"badgeid": [1], "level": 1, "completion_time": 2, "scarcity": 3}
            )

    def test_optional_fields_default_to_none(self):
        p = PlayerSummary.from_json(
            {"steamid": "1", "personaname": "a", "avatarfull": "b"}
        )
        assert p.lastlogoff is None
        assert p.profileurl is None

    def test_percent_accepts_numeric_string(self):
        row = GlobalPercentage.from_json({"name": "WIN", "percent": "12.345"})
        assert row.percent == pytest.approx(12.345)

    def test_wrongly_typed_optional_field_raises(self):
        with pytest.raises(DecodeError, match="playtime_2weeks"):
            OwnedGame.from_json(
                {
                    "appid": 10,
                    "name": "Ten",
                    "playtime_forever": 5,
                    "img_icon_url": "abc",
                    "playtime_2weeks": "lots",
                }
            )

    def test_non_object_raises(self):
        with pytest.raises(DecodeError, match="FriendEntry"):
            FriendEntry.from_json(["76500000000000002", 99])

    def test_decode_error_chains_validation_error(self):
        with pytest.raises(DecodeError) as exc:
            GlobalPercentage.from_json({"name": "WIN", "percent": "often"})
        assert isinstance(exc.value.__cause__, ValidationError)

    def test_numeric_steamid_is_kept_as_string(self):
        p = PlayerSummary.from_json(
            {"steamid": 76500000000000001, "personaname": "a", "avatarfull": "b"}
        )
        assert p.steamid == "76500000000000001"


class TestBadgeVariants:
    """Badge kind is decided once, from the presence of communityid."""

    def test_community_badge(self):
        b = BadgeEntry.from_json(
            {
                "badgeid": 1,
                "appid": 440,
                "level": 3,
                "completion_time": 100,
                "xp": 300,
                "communityid": "440",
                "border_color": 0,
                "scarcity": 12345,
            }
        )
        assert b.kind == "community"
        assert b.is_community
        assert b.appid == 440
        assert b.communityid == "440"

    def test_null_communityid_stays_none(self):
        b = BadgeEntry.from_json(
            {
                "badgeid": 1,
                "appid": 440,
                "level": 3,
                "completion_time": 100,
                "communityid": None,
                "scarcity": 12345,
            }
        )
        assert b.kind == "community"
        assert b.communityid is None
        assert b.appid == 440

    def test_plain_badge(self):
        b = BadgeEntry.from_json(
            {"badgeid": 13, "level": 50, "completion_time": 100, "xp": 1, "scarcity": 9}
        )
        assert b.kind == "plain"
        assert b.appid is None
        assert b.communityid is None


class TestOutputRecords:
    """to_dict drops optional fields that are missing."""

    def test_achievement_without_percent_omits_key(self):
        a = Achievement(
            apiname="WIN", achieved=1, unlocktime=5, name="Win", description="d"
        )
        d = a.to_dict()
        assert "percent" not in d
        assert "icon" not in d
        assert d["apiname"] == "WIN"

    def test_achievement_without_name_omits_keys(self):
        d = Achievement(apiname="WIN", achieved=0, unlocktime=0, name=None, description=None).to_dict()
        assert "name" not in d
        assert "description" not in d

    def test_game_without_achievements_omits_keys(self):
        g = Game(appid=1, name="x", playtime=0, last_played=0, icon_url="")
        d = g.to_dict()
        assert "achievements" not in d
        assert "num_achievements" not in d
        assert "playtime_2weeks" not in d

    def test_game_with_empty_achievement_list_keeps_key(self):
        g = Game(
            appid=1,
            name="x",
            playtime=0,
            last_played=0,
            icon_url="",
            num_achievements=4,
            achievements=[],
        )
        d = g.to_dict()
        assert d["achievements"] == []
        assert d["num_achievements"] == 4

    def test_friend_lastlogoff_optional(self):
        f = Friend(steamid="1", avatar="a", username="u", friend_since=3)
        assert list(f.to_dict()) == ["steamid", "avatar", "username", "friend_since"]

    def test_quote_normalize(self):
        assert quote_normalize('Alice "The Gamer"') == "Alice 'The Gamer'"
        assert quote_normalize(None) is None
