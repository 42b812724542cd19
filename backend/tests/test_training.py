"""
TerpTaster Backend - Terp Training Game Unit Tests
==================================================

What:  Profile expansion, question dealing per mode, guess checking with
       streak/strike counters, and hints.
How:   TrainingService over the small conftest dataset with a seeded
       random.Random, so every run deals the same cards.

Profiles of the small dataset (id: terpene/flavor):
    0 Myrcene/Earthy   1 Myrcene/Musky   2 Limonene/Citrus
    3 Limonene/Lemon   4 Pinene/Pine     5 Pinene/Woody
"""

import random

import pytest

from terptaster.exceptions import NotFoundError, ValidationError
from terptaster.schemas.terpene import Terpene
from terptaster.schemas.training import TrainingMode
from terptaster.services.terpene_dataset import TerpeneDataset
from terptaster.services.training import TrainingService, build_profiles


@pytest.fixture
def service(small_dataset):
    return TrainingService(
        small_dataset,
        rng=random.Random(42),
        max_strikes=3,
        max_hints=3,
        choice_count=4,
    )


class TestBuildProfiles:

    def test_one_profile_per_flavor_in_dataset_order(self, small_dataset):
        profiles = build_profiles(small_dataset)
        assert [(p.profile_id, p.name, p.flavor) for p in profiles] == [
            (0, "Myrcene", "Earthy"),
            (1, "Myrcene", "Musky"),
            (2, "Limonene", "Citrus"),
            (3, "Limonene", "Lemon"),
            (4, "Pinene", "Pine"),
            (5, "Pinene", "Woody"),
        ]

    def test_profiles_carry_display_data(self, small_dataset):
        profile = build_profiles(small_dataset)[0]
        assert profile.effects == "Relaxing, sedating"
        assert profile.notable_strains == ["Blue Dream", "OG Kush"]


class TestNewQuestion:

    def test_learning_mode_reveals_everything(self, service):
        question = service.new_question(TrainingMode.LEARNING)
        assert question.details is not None
        assert question.details.name == question.terpene
        assert question.options is None
        assert question.max_hints == 0

    def test_expert_mode_has_no_options(self, service):
        question = service.new_question(TrainingMode.EXPERT)
        assert question.options is None
        assert question.details is None
        assert question.prompt == f"Guess the flavor or scent of the terpene: {question.terpene}"
        assert question.max_hints == 3

    def test_multiple_choice_contains_answer_once(self, service):
        for _ in range(20):
            question = service.new_question(TrainingMode.MULTIPLE_CHOICE)
            answer = service.get_profile(question.profile_id).flavor
            assert len(question.options) == 4
            assert question.options.count(answer) == 1
            assert len({o.lower() for o in question.options}) == 4

    def test_seeded_services_deal_the_same_question(self, small_dataset):
        first = TrainingService(small_dataset, rng=random.Random(7)).new_question(TrainingMode.MULTIPLE_CHOICE)
        second = TrainingService(small_dataset, rng=random.Random(7)).new_question(TrainingMode.MULTIPLE_CHOICE)
        assert first == second

    def test_options_capped_by_distinct_flavors(self):
        dataset = TerpeneDataset(
            [
                Terpene(name="Myrcene", possible_flavors=("Earthy",)),
                Terpene(name="Humulene", possible_flavors=("earthy", "Hoppy")),
            ]
        )
        service = TrainingService(dataset, rng=random.Random(1), choice_count=4)
        options = service.multiple_choice_options(service.get_profile(0))
        # "earthy" duplicates the answer case-insensitively, so only Hoppy remains
        assert sorted(options) == ["Earthy", "Hoppy"]


class TestCheckGuess:

    def test_correct_guess_increments_streak(self, service):
        result = service.check_guess(0, "  earthy ", streak=2, strikes=1)
        assert result.correct is True
        assert result.streak == 3
        assert result.strikes == 1
        assert result.game_over is False
        assert result.feedback == "Correct! The flavor of Myrcene is Earthy."

    def test_wrong_guess_adds_strike_and_resets_streak(self, service):
        result = service.check_guess(0, "Citrus", streak=4, strikes=0)
        assert result.correct is False
        assert result.streak == 0
        assert result.strikes == 1
        assert result.feedback == "Wrong! The correct flavor for Myrcene is Earthy."
        assert result.answer.flavor == "Earthy"

    def test_third_strike_ends_game(self, service):
        result = service.check_guess(2, "Pine", streak=0, strikes=2)
        assert result.strikes == 3
        assert result.game_over is True

    def test_unknown_profile(self, service):
        with pytest.raises(NotFoundError):
            service.check_guess(99, "Earthy")


class TestHint:

    def test_hints_in_fixed_order(self, service):
        assert service.hint(0, 0).hint == "Relaxing, sedating"
        assert service.hint(0, 1).hint == "Also found in mangoes."
        last = service.hint(0, 2)
        assert last.hint == "Blue Dream, OG Kush"
        assert last.hints_remaining == 0

    @pytest.mark.parametrize("index", [-1, 3])
    def test_out_of_range(self, service, index):
        with pytest.raises(ValidationError):
            service.hint(0, index)

    def test_unknown_profile(self, service):
        with pytest.raises(NotFoundError):
            service.hint(6, 0)
