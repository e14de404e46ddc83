"""
scores.py

Score and persistence collaborator. Consumes the events emitted by the
simulation controller, keeps the running score, stores the best scores per
mode and tracks campaign level progression. The simulation core itself never
persists anything.
"""

import os
import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from cubesnake.config import CAMPAIGN_LEVELS, GameConfig, GameMode, LevelInfo, level_info
from cubesnake.game import ApplePickedUp, BoardFilled, GameEvent, SnakeCollided
from cubesnake.resources import ResourceManager

logger = logging.getLogger(__name__)

##########################
# SCORE MANAGEMENT
##########################

def clean_highscores(data: Any) -> Dict[str, List[Dict[str, Any]]]:
    """
    Keep only well-formed entries from a loaded highscores file:
    known mode names mapping to lists of {"name": str, "score": int} dicts.
    """
    if not isinstance(data, dict):
        raise TypeError(f"highscores must be a mapping, got {type(data).__name__}")
    known = {mode.value for mode in GameMode}
    cleaned = {}
    for mode, entries in data.items():
        if mode not in known or not isinstance(entries, list):
            logger.warning(f"Dropping malformed highscores for {mode!r}")
            continue
        valid = [
            {"name": str(entry.get("name", "Player")), "score": entry["score"]}
            for entry in entries
            if isinstance(entry, dict) and isinstance(entry.get("score"), int)
            and not isinstance(entry.get("score"), bool)
        ]
        if len(valid) < len(entries):
            logger.warning(f"Dropped {len(entries) - len(valid)} malformed {mode} entries")
        valid.sort(key=lambda x: x["score"], reverse=True)
        cleaned[mode] = valid
    return cleaned


class ScoreManager:
    """
    Handles score tracking and persistence.
    Manages high scores for the different game modes.
    """
    def __init__(self, config: GameConfig, resource_manager: ResourceManager):
        self.config = config
        self.resource_manager = resource_manager
        self.score = 0
        self.highscores: Dict[str, List[Dict[str, Any]]] = {mode.value: [] for mode in GameMode}
        self.load_scores()

    def load_scores(self) -> None:
        """Load high scores from file"""
        highscores_path = self.resource_manager.get_data_path("highscores.json")
        if os.path.exists(highscores_path):
            try:
                with open(highscores_path, 'r') as f:
                    self.highscores.update(clean_highscores(json.load(f)))
                logger.info("High scores loaded successfully.")
            except (OSError, ValueError, TypeError) as e:
                logger.error(f"Error loading highscores: {e}")
        else:
            # Initialize empty highscores file
            self.save_scores()

    def save_scores(self) -> None:
        """Save high scores to file"""
        highscores_path = self.resource_manager.get_data_path("highscores.json")
        try:
            with open(highscores_path, 'w') as f:
                json.dump(self.highscores, f, indent=4)
            logger.info("High scores saved successfully.")
        except OSError as e:
            logger.error(f"Error saving highscores: {e}")

    def points_for_apple(self, mode: GameMode) -> int:
        bonus = (1 + self.config.OBSTACLE_BONUS) if mode.uses_obstacles else 1
        return self.config.POINTS_PER_APPLE * bonus

    def handle_events(self, events: Iterable[GameEvent], mode: GameMode) -> int:
        """Apply simulation events to the running score; returns the new score"""
        for event in events:
            if isinstance(event, ApplePickedUp):
                self.score += self.points_for_apple(mode)
            elif isinstance(event, SnakeCollided):
                logger.info(f"Round ended by {event.reason.value} with score {self.score}")
            elif isinstance(event, BoardFilled):
                logger.info(f"Board filled at length {event.length}, score {self.score}")
        return self.score

    def reset(self) -> None:
        self.score = 0

    def best(self, mode: GameMode) -> int:
        entries = self.highscores.get(mode.value, [])
        return entries[0]["score"] if entries else 0

    def add_score(self, name: str, score: int, mode: GameMode) -> None:
        """Add new score and maintain sorted order"""
        entries = self.highscores.setdefault(mode.value, [])
        entries.append({"name": name, "score": score})
        entries.sort(key=lambda x: x["score"], reverse=True)
        self.highscores[mode.value] = entries[:self.config.MAX_SCORES]
        self.save_scores()

##########################
# CAMPAIGN
##########################

class CampaignProgress:
    """
    Level bookkeeping for the campaign mode. Each level asks for a number of
    apples; reaching it completes the level and unlocks the next one.
    """
    def __init__(self, resource_manager: ResourceManager):
        self.resource_manager = resource_manager
        self.level = 1
        self.apples = 0
        self.finished = False
        self.cleared = False  # set when the last level was cleared this session
        self.load()

    @property
    def info(self) -> LevelInfo:
        return level_info(self.level)

    def record_apple(self) -> bool:
        """Count one apple; True once the current level's target is reached"""
        self.apples += 1
        return self.apples >= self.info.target_apples

    def next_level(self) -> Optional[LevelInfo]:
        """Move to the next level, None when the last level was just cleared"""
        self.apples = 0
        if self.level >= len(CAMPAIGN_LEVELS):
            self.finished = True
            self.cleared = True
            logger.info("Campaign completed!")
            self.save()
            return None
        self.level += 1
        logger.info(f"Campaign advanced to level {self.level}: {self.info.name}")
        self.save()
        return self.info

    def restart_level(self) -> None:
        self.apples = 0
        self.cleared = False

    def start(self) -> LevelInfo:
        """Level to play when the campaign is picked from the menu; a finished campaign starts over"""
        if self.finished:
            logger.info("Campaign was completed, starting again from level 1")
            return self.reset()
        self.restart_level()
        return self.info

    def reset(self) -> LevelInfo:
        self.level = 1
        self.apples = 0
        self.finished = False
        self.cleared = False
        self.save()
        return self.info

    def load(self) -> None:
        path = self.resource_manager.get_data_path("campaign.json")
        if not os.path.exists(path):
            return
        try:
            with open(path, 'r') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise TypeError(f"campaign progress must be a mapping, got {type(data).__name__}")
            level = max(1, min(len(CAMPAIGN_LEVELS), int(data.get("level", 1))))
            self.level, self.finished = level, bool(data.get("finished", False))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Error loading campaign progress: {e}")

    def save(self) -> None:
        path = self.resource_manager.get_data_path("campaign.json")
        try:
            with open(path, 'w') as f:
                json.dump({"level": self.level, "finished": self.finished}, f, indent=4)
        except OSError as e:
            logger.error(f"Error saving campaign progress: {e}")
