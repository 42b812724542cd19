"""
TerpTaster Backend - Terp Training Game
=======================================

What:  Question generation, guess checking and hints for the training game.
How:   The dataset is expanded into one profile per (terpene, flavor) pair.
       A question picks a random profile; the player must name its flavor.
       Randomness comes from an injected `random.Random`, so a seeded
       service always deals the same questions.
Who:   /api/training routes (one service per request, built from the shared
       dataset by `get_training_service`).

Counters:
    streak   +1 on a correct guess, reset to 0 on a wrong one
    strikes  +1 on a wrong guess; the game is over at `max_strikes`
"""

import logging
import random
from typing import List, Optional

from fastapi import Depends

from terptaster.config import settings
from terptaster.exceptions import NotFoundError, ValidationError
from terptaster.schemas.training import (
    GuessResult,
    HintResponse,
    TerpeneProfile,
    TrainingMode,
    TrainingQuestion,
)
from terptaster.services.terpene_dataset import TerpeneDataset, get_terpene_dataset

logger = logging.getLogger(__name__)


def build_profiles(dataset: TerpeneDataset) -> List[TerpeneProfile]:
    """Expand every terpene into one profile per possible flavor, in dataset order."""
    profiles: List[TerpeneProfile] = []
    for terpene in dataset.terpenes:
        for flavor in terpene.possible_flavors:
            profiles.append(
                TerpeneProfile(
                    profile_id=len(profiles),
                    name=terpene.name,
                    flavor=flavor,
                    effects=terpene.effects,
                    fun_fact=terpene.fun_fact,
                    notable_strains=list(terpene.notable_strains),
                )
            )
    return profiles


class TrainingService:
    """
    Stateless game rules over a fixed profile list.

    Args:
        dataset:       Terpene reference data.
        rng:           Random source (seed it in tests).
        max_strikes:   Strikes that end the game (default: settings).
        max_hints:     Hints available per question (default: settings).
        choice_count:  Options in multiple-choice mode (default: settings).
    """

    def __init__(
        self,
        dataset: TerpeneDataset,
        rng: Optional[random.Random] = None,
        max_strikes: Optional[int] = None,
        max_hints: Optional[int] = None,
        choice_count: Optional[int] = None,
    ):
        self.profiles = build_profiles(dataset)
        self.rng = rng or random.Random()
        self.max_strikes = max_strikes if max_strikes is not None else settings.training_max_strikes
        self.max_hints = max_hints if max_hints is not None else settings.training_max_hints
        self.choice_count = choice_count if choice_count is not None else settings.training_choice_count

    def get_profile(self, profile_id: int) -> TerpeneProfile:
        if not 0 <= profile_id < len(self.profiles):
            raise NotFoundError(resource="training profile", resource_id=str(profile_id))
        return self.profiles[profile_id]

    def random_profile(self) -> TerpeneProfile:
        if not self.profiles:
            raise NotFoundError(resource="training profile")
        return self.rng.choice(self.profiles)

    def multiple_choice_options(self, profile: TerpeneProfile) -> List[str]:
        """
        The correct flavor plus distinct distractor flavors, shuffled.

        Distractors never repeat a label already on offer (case-insensitive),
        so each button text is unambiguous. With fewer distinct flavors than
        `choice_count`, every flavor is offered.
        """
        taken = {profile.flavor.lower()}
        pool: List[str] = []
        for candidate in self.profiles:
            key = candidate.flavor.lower()
            if key not in taken:
                taken.add(key)
                pool.append(candidate.flavor)

        distractors = self.rng.sample(pool, min(self.choice_count - 1, len(pool)))
        options = [profile.flavor] + distractors
        self.rng.shuffle(options)
        return options

    def new_question(self, mode: TrainingMode) -> TrainingQuestion:
        profile = self.random_profile()

        if mode == TrainingMode.LEARNING:
            return TrainingQuestion(
                profile_id=profile.profile_id,
                mode=mode,
                terpene=profile.name,
                prompt=f"Learn the flavor of {profile.name}",
                details=profile,
                max_hints=0,
            )

        return TrainingQuestion(
            profile_id=profile.profile_id,
            mode=mode,
            terpene=profile.name,
            prompt=f"Guess the flavor or scent of the terpene: {profile.name}",
            options=(
                self.multiple_choice_options(profile)
                if mode == TrainingMode.MULTIPLE_CHOICE
                else None
            ),
            max_hints=self.max_hints,
        )

    def check_guess(
        self,
        profile_id: int,
        guess: str,
        streak: int = 0,
        strikes: int = 0,
    ) -> GuessResult:
        """
        Compare a guess with the profile's flavor (trimmed, case-insensitive)
        and advance the counters.
        """
        profile = self.get_profile(profile_id)
        correct = guess.strip().lower() == profile.flavor.lower()

        if correct:
            streak += 1
            feedback = f"Correct! The flavor of {profile.name} is {profile.flavor}."
        else:
            streak = 0
            strikes += 1
            feedback = f"Wrong! The correct flavor for {profile.name} is {profile.flavor}."

        game_over = strikes >= self.max_strikes
        if game_over:
            logger.debug("Training game over after %d strikes", strikes)

        return GuessResult(
            correct=correct,
            feedback=feedback,
            streak=streak,
            strikes=strikes,
            game_over=game_over,
            answer=profile,
        )

    def hint(self, profile_id: int, index: int) -> HintResponse:
        """
        Hints are revealed in a fixed order: effects, fun fact, notable strains.

        Raises:
            ValidationError: index outside 0..max_hints-1
            NotFoundError:   unknown profile id
        """
        profile = self.get_profile(profile_id)
        if not 0 <= index < self.max_hints:
            raise ValidationError(
                message=f"Hint index must be between 0 and {self.max_hints - 1}",
                field="index",
                context={"max_hints": self.max_hints},
            )

        hints = [profile.effects, profile.fun_fact, ", ".join(profile.notable_strains)]
        return HintResponse(
            profile_id=profile.profile_id,
            index=index,
            hint=hints[index],
            hints_remaining=self.max_hints - index - 1,
        )


def get_training_service(
    dataset: TerpeneDataset = Depends(get_terpene_dataset),
) -> TrainingService:
    """FastAPI dependency: a fresh game service over the shared dataset."""
    return TrainingService(dataset)
