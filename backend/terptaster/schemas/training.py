"""
TerpTaster Backend - Terp Training Game Schemas
===============================================

What:  Request/response models for the terp training game.
Who:   Returned by /api/training/* routes.

The game is stateless on the server: the client keeps its streak and
strike counters and sends them with each guess; the server answers with the
updated values.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class TrainingMode(str, Enum):
    """Difficulty modes."""
    LEARNING = "learning"                 # everything revealed, no guessing
    MULTIPLE_CHOICE = "multiple_choice"   # pick the flavor from a few options
    EXPERT = "expert"                     # type the flavor


class TerpeneProfile(BaseModel):
    """
    One (terpene, flavor) pair plus the terpene's display data.

    `profile_id` is the profile's position in the expanded profile list, which
    is derived deterministically from the dataset order.
    """
    profile_id: int = Field(ge=0)
    name: str
    flavor: str
    effects: str
    fun_fact: str
    notable_strains: List[str]

    model_config = {"frozen": True}


class TrainingQuestion(BaseModel):
    """Returned by GET /api/training/question."""
    profile_id: int = Field(description="Send this back with guesses and hint requests")
    mode: TrainingMode
    terpene: str = Field(description="Terpene the player has to describe")
    prompt: str
    options: Optional[List[str]] = Field(
        default=None,
        description="Flavor choices (multiple_choice mode only)",
    )
    details: Optional[TerpeneProfile] = Field(
        default=None,
        description="Full profile (learning mode only)",
    )
    max_hints: int


class GuessRequest(BaseModel):
    """Body for POST /api/training/guess."""
    profile_id: int = Field(ge=0)
    guess: str = Field(min_length=1, max_length=100)
    streak: int = Field(default=0, ge=0, description="Current streak before this guess")
    strikes: int = Field(default=0, ge=0, description="Current strikes before this guess")


class GuessResult(BaseModel):
    """Outcome of one guess, with updated counters and the revealed answer."""
    correct: bool
    feedback: str
    streak: int
    strikes: int
    game_over: bool = Field(description="True once strikes reach the configured maximum")
    answer: TerpeneProfile


class HintResponse(BaseModel):
    """Returned by GET /api/training/hint."""
    profile_id: int
    index: int
    hint: str
    hints_remaining: int
