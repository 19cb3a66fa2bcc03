"""Unit tests for the pure progression rules."""

import random
from datetime import timedelta

import pytest

from src.domain.pet import PetAction, PetAttributes, PetSpecies
from src.services import progression
from tests.unit.mocks import FixedChoiceRandom


@pytest.mark.unit
class TestExperienceRequired:
    """Tests for the experience curve."""

    @pytest.mark.parametrize(("level", "expected"), [(1, 100), (2, 400), (5, 2500), (15, 22500), (16, 25600)])
    def test_closed_form(self, level, expected):
        assert progression.experience_required(level) == expected

    def test_strictly_increasing(self):
        for level in range(1, 500):
            assert progression.experience_required(level) < progression.experience_required(level + 1)

    @pytest.mark.parametrize("level", [0, -1])
    def test_rejects_non_positive_level(self, level):
        with pytest.raises(ValueError, match="Level must be >= 1"):
            progression.experience_required(level)


@pytest.mark.unit
class TestDerivedStats:
    """Tests for level progress, power level and next-level requirements."""

    def test_level_progress_midway(self, make_pet):
        # Level 4 spans 1600..2500
        pet = make_pet(level=4, experience=2050)
        assert progression.level_progress(pet) == 50

    def test_level_progress_floors(self, make_pet):
        pet = make_pet(level=4, experience=1609)
        assert progression.level_progress(pet) == 1

    def test_level_progress_fresh_pet_is_zero(self, make_pet):
        pet = make_pet(level=1, experience=0)
        assert progression.level_progress(pet) == 0

    def test_power_level_sums_attributes(self, make_pet):
        pet = make_pet(attributes=PetAttributes(strength=95, agility=78, intelligence=88, stamina=82))
        assert progression.power_level(pet) == 343

    def test_next_level_requirements(self):
        requirements = progression.next_level_requirements(15)

        assert requirements.experience_required == 25600
        assert requirements.training_sessions_needed == 52
        assert requirements.estimated_days == 128

    def test_can_level_up(self, make_pet):
        assert progression.can_level_up(make_pet(level=1, experience=400))
        assert not progression.can_level_up(make_pet(level=1, experience=399))

    def test_species_type_number(self):
        assert progression.species_type_number(PetSpecies.DRAGON) == 1
        assert progression.species_type_number(PetSpecies.BIRD) == 4
        assert progression.species_type_number(PetSpecies.UNKNOWN) == 0


@pytest.mark.unit
class TestStatusEffects:
    """Tests for status effect derivation."""

    def test_happy_and_hungry_co_occur(self, make_pet, now):
        pet = make_pet(happiness=75, energy=50, health=80, last_fed=now - timedelta(hours=13))
        assert progression.status_effects(pet, now) == ["Happy", "Hungry"]

    def test_very_happy_energetic_healthy(self, make_pet, now):
        pet = make_pet(happiness=90, energy=95, health=100)
        assert progression.status_effects(pet, now) == ["Very Happy", "Energetic", "Healthy"]

    def test_sad_tired_needs_care(self, make_pet, now):
        pet = make_pet(happiness=30, energy=30, health=50)
        assert progression.status_effects(pet, now) == ["Sad", "Tired", "Needs Care"]

    def test_neutral_pet_has_no_effects(self, make_pet, now):
        pet = make_pet(happiness=50, energy=50, health=75)
        assert progression.status_effects(pet, now) == []

    def test_exactly_twelve_hours_is_not_hungry(self, make_pet, now):
        pet = make_pet(happiness=50, energy=50, health=75, last_fed=now - timedelta(hours=12))
        assert "Hungry" not in progression.status_effects(pet, now)

    def test_custom_hunger_threshold(self, make_pet, now):
        pet = make_pet(happiness=50, energy=50, health=75, last_fed=now - timedelta(hours=3))
        assert progression.status_effects(pet, now, hunger_threshold_hours=2) == ["Hungry"]


@pytest.mark.unit
class TestGainExperience:
    """Tests for the level-up pass."""

    def test_no_level_up_below_threshold(self, make_pet, now):
        pet = make_pet(level=1, experience=0)
        outcome = progression.gain_experience(pet, 399, rng=FixedChoiceRandom(), now=now)

        assert outcome.levels_gained == 0
        assert outcome.pet.level == 1
        assert outcome.pet.experience == 399
        assert outcome.pet.experience_to_next_level == 1
        assert outcome.pet.last_level_up is None

    def test_does_not_modify_input(self, make_pet, now):
        pet = make_pet(level=1, experience=0)
        progression.gain_experience(pet, 5000, rng=FixedChoiceRandom(), now=now)

        assert pet.level == 1
        assert pet.experience == 0
        assert pet.skills == []

    def test_multi_level_jump_unlocks_skills_in_order(self, make_pet, now):
        pet = make_pet(species=PetSpecies.CAT, level=1, experience=0)
        # 10000 experience reaches level 10 (10000 < 12100)
        outcome = progression.gain_experience(pet, 10000, rng=FixedChoiceRandom(), now=now)

        assert outcome.pet.level == 10
        assert outcome.levels_gained == 9
        assert outcome.pet.skills == ["Stealth", "Climbing", "Night Vision"]
        assert outcome.new_skills == ["Stealth", "Climbing", "Night Vision"]
        assert outcome.pet.last_level_up == now

    def test_already_held_skill_is_not_duplicated(self, make_pet, now):
        pet = make_pet(species=PetSpecies.CAT, level=8, experience=7860, skills=["Stealth", "Night Vision"])
        outcome = progression.gain_experience(pet, 240, rng=FixedChoiceRandom(), now=now)

        assert outcome.pet.level == 9
        assert outcome.pet.skills == ["Stealth", "Night Vision"]
        assert outcome.new_skills == []

    def test_unknown_species_learns_nothing(self, make_pet, now):
        pet = make_pet(species="Axolotl", level=1, experience=0)
        outcome = progression.gain_experience(pet, 2500, rng=FixedChoiceRandom(), now=now)

        assert outcome.pet.species == PetSpecies.UNKNOWN
        assert outcome.pet.level == 5
        assert outcome.pet.skills == []

    def test_attributes_grow_per_level_and_clamp(self, make_pet, now):
        pet = make_pet(
            level=1,
            experience=0,
            attributes=PetAttributes(strength=99, agility=10, intelligence=50, stamina=0),
        )
        # Two levels, +3 per attribute per level
        outcome = progression.gain_experience(pet, 900, rng=FixedChoiceRandom(), now=now)

        assert outcome.pet.level == 3
        assert outcome.pet.attributes == PetAttributes(strength=100, agility=16, intelligence=56, stamina=6)

    def test_attribute_draws_are_independent(self, make_pet, now):
        pet = make_pet(level=1, experience=0)
        outcome = progression.gain_experience(pet, 400, rng=random.Random(7), now=now)

        for name in PetAttributes.NAMES:
            increase = getattr(outcome.pet.attributes, name) - getattr(pet.attributes, name)
            assert increase in (1, 2, 3)

    def test_seeded_rng_is_reproducible(self, make_pet, now):
        pet = make_pet(level=1, experience=0)
        first = progression.gain_experience(pet, 10000, rng=random.Random(42), now=now)
        second = progression.gain_experience(pet, 10000, rng=random.Random(42), now=now)

        assert first.pet.attributes == second.pet.attributes

    def test_negative_delta_rejected(self, make_pet, now):
        with pytest.raises(ValueError, match="non-negative"):
            progression.gain_experience(make_pet(), -1, rng=FixedChoiceRandom(), now=now)

    @pytest.mark.parametrize("delta", [0, 1, 99, 300, 1234, 25000, 99999])
    def test_post_condition_holds(self, make_pet, now, delta):
        pet = make_pet(level=3, experience=900)
        result = progression.gain_experience(pet, delta, rng=random.Random(delta), now=now).pet

        assert result.experience >= progression.experience_required(result.level)
        assert result.experience < progression.experience_required(result.level + 1)
        assert result.experience_to_next_level == progression.experience_required(result.level + 1) - result.experience


@pytest.mark.unit
class TestActionEffects:
    """Tests for care action effects."""

    def test_feed(self, make_pet, now):
        pet = make_pet(happiness=95, energy=90, health=98)
        progression.apply_action_effects(pet, PetAction.FEED, now)

        assert (pet.happiness, pet.energy, pet.health) == (100, 100, 100)
        assert pet.last_fed == now

    def test_play(self, make_pet, now):
        pet = make_pet(happiness=60, energy=5, health=80)
        progression.apply_action_effects(pet, PetAction.PLAY, now)

        assert (pet.happiness, pet.energy, pet.health) == (75, 0, 80)
        assert pet.last_played == now

    def test_train(self, make_pet, now):
        pet = make_pet(happiness=60, energy=60, health=80)
        last_fed = pet.last_fed
        progression.apply_action_effects(pet, PetAction.TRAIN, now)

        assert (pet.happiness, pet.energy, pet.health) == (65, 40, 80)
        assert pet.last_fed == last_fed

    def test_rest(self, make_pet, now):
        pet = make_pet(happiness=60, energy=80, health=95)
        progression.apply_action_effects(pet, PetAction.REST, now)

        assert (pet.happiness, pet.energy, pet.health) == (60, 100, 100)


@pytest.mark.unit
def test_build_pet_view_attaches_derived_fields(make_pet, now):
    pet = make_pet(level=4, experience=2050, happiness=75, last_fed=now - timedelta(hours=20))
    view = progression.build_pet_view(pet, now)

    assert view.level_progress == 50
    assert view.power_level == 200
    assert view.next_level_requirements.experience_required == 2500
    assert view.status_effects == ["Happy", "Hungry"]
    assert view.can_level_up is False
    assert view.type_number == 1
    assert view.total_experience == 2050
