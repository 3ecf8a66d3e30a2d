"""
Unit tests for RoleVector and the characteristic profile model.
"""

import math

import pytest

from studymatch.models.profile import CharacteristicProfile, QuizStatus
from studymatch.models.roles import RoleType, RoleVector


class TestRoleVector:
    """Tests for the 7-role vector type."""

    def test_every_role_present_with_zero_default(self):
        vector = RoleVector(scores={RoleType.LEADER: 0.4})

        assert set(vector.scores) == set(RoleType)
        assert vector.get(RoleType.LEADER) == 0.4
        assert vector.get(RoleType.CHALLENGER) == 0.0

    @pytest.mark.parametrize("raw, expected", [(1.7, 1.0), (-0.3, 0.0), (float("nan"), 0.0), (0.25, 0.25)])
    def test_values_clamped_to_unit_interval(self, raw, expected):
        vector = RoleVector(scores={RoleType.PLANNER: raw})

        assert vector.get(RoleType.PLANNER) == expected

    def test_complement_is_one_minus_value(self):
        vector = RoleVector(scores={RoleType.LEADER: 0.8, RoleType.PLANNER: 0.1})

        complement = vector.complement()

        assert complement.get(RoleType.LEADER) == pytest.approx(0.2)
        assert complement.get(RoleType.PLANNER) == pytest.approx(0.9)
        assert complement.get(RoleType.EXPERT) == 1.0

    def test_norm_and_dot(self):
        a = RoleVector(scores={RoleType.LEADER: 0.6, RoleType.EXPERT: 0.8})
        b = RoleVector(scores={RoleType.LEADER: 1.0})

        assert a.norm() == pytest.approx(1.0)
        assert a.dot(b) == pytest.approx(0.6)
        assert RoleVector.zeros().norm() == 0.0
        assert RoleVector.zeros().is_zero()

    def test_as_list_follows_declaration_order(self):
        vector = RoleVector(scores={RoleType.CHALLENGER: 0.5, RoleType.LEADER: 0.1})

        values = vector.as_list()

        assert len(values) == 7
        assert values[0] == 0.1
        assert values[-1] == 0.5

    def test_dominant_role_ties_go_to_team_player(self):
        vector = RoleVector(scores={RoleType.LEADER: 0.5, RoleType.TEAM_PLAYER: 0.5})

        assert vector.dominant_role() == RoleType.TEAM_PLAYER

    def test_dominant_role_ties_without_team_player_use_declaration_order(self):
        vector = RoleVector(scores={RoleType.EXPERT: 0.7, RoleType.PLANNER: 0.7})

        assert vector.dominant_role() == RoleType.PLANNER

    def test_top_roles(self):
        vector = RoleVector(scores={RoleType.EXPERT: 0.9, RoleType.CREATIVE: 0.4, RoleType.LEADER: 0.6})

        top = vector.get_top_roles(2)

        assert [role for role, _ in top] == [RoleType.EXPERT, RoleType.LEADER]

    def test_json_roundtrip_keeps_roles(self):
        vector = RoleVector(scores={RoleType.COMMUNICATOR: 0.33})

        restored = RoleVector.model_validate_json(vector.model_dump_json())

        assert restored == vector


class TestCharacteristicProfile:
    """Reliability and onboarding flags."""

    def test_reliability_is_answered_fraction(self):
        profile = CharacteristicProfile(
            user_id=1, quiz_status=QuizStatus.IN_PROGRESS, total_questions=3, answered_questions=1
        )

        profile.update_reliability()

        assert math.isclose(profile.reliability_percentage, 1 / 3)

    def test_reliability_zero_when_skipped(self):
        profile = CharacteristicProfile(
            user_id=1, quiz_status=QuizStatus.SKIPPED, total_questions=3, answered_questions=3
        )

        profile.update_reliability()

        assert profile.reliability_percentage == 0.0

    def test_new_profile_requires_onboarding(self):
        assert CharacteristicProfile(user_id=1).requires_onboarding
        assert not CharacteristicProfile(user_id=1, quiz_status=QuizStatus.SKIPPED).requires_onboarding
