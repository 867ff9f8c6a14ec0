"""Shared enums for content, progress and profiles."""

from __future__ import annotations

from enum import StrEnum


class GameMode(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"


class Rarity(StrEnum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class AchievementId(StrEnum):
    FIRST_BLOOD = "first_blood"
    SPEED_DEMON = "speed_demon"
    THOROUGH = "thorough"
    LONE_WOLF = "lone_wolf"
    STREAK_3 = "streak_3"
    STREAK_7 = "streak_7"
    STREAK_30 = "streak_30"
    PERFECT_RECORD = "perfect_record"
    VETERAN = "veteran"
    MASTER = "master"
    LEGEND = "legend"


class DetectiveRank(StrEnum):
    ROOKIE = "Rookie"
    JUNIOR = "Junior"
    SENIOR = "Senior"
    VETERAN = "Veteran"
    ACE = "Ace"
    MASTER = "Master"
    LEGEND = "Legend"
