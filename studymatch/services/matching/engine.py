import asyncio

from loguru import logger

from studymatch.core.config import settings
from studymatch.core.constants import (
    MEMBER_REASON,
    MEMBER_SCORE,
    NEW_GROUP_REASON,
    NEW_GROUP_SCORE,
    NO_PROFILE_REASON,
    NO_PROFILE_SCORE,
)
from studymatch.core.exceptions import NotFoundError
from studymatch.models.directory import GroupInfo
from studymatch.models.matching import GroupRecommendation
from studymatch.models.profile import CharacteristicProfile, GroupCharacteristicProfile
from studymatch.services.directory.base import MembershipDirectory
from studymatch.services.matching.filters import GroupFilters
from studymatch.services.matching.similarity import complementary_similarity, match_reason, to_percentage
from studymatch.services.stores.base import GroupProfileStore, ProfileStore


def score_against_aggregate(
    student: CharacteristicProfile, aggregate: GroupCharacteristicProfile | None
) -> tuple[int, str]:
    """Complementary-vector score of one student against one stored group aggregate."""
    if aggregate is None or aggregate.member_count == 0:
        return NEW_GROUP_SCORE, NEW_GROUP_REASON

    similarity = complementary_similarity(student.role_vector, aggregate.average_role_vector)
    return to_percentage(similarity), match_reason(similarity)


class MatchingEngine:
    """
    Ranks study groups for a student by how well the student fills the
    roles each group currently lacks.

    Scores are computed on demand from the stored group aggregates, which
    may lag one membership change behind.
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        group_store: GroupProfileStore,
        membership: MembershipDirectory,
        top_limit: int | None = None,
    ):
        self.profile_store = profile_store
        self.group_store = group_store
        self.membership = membership
        self.top_limit = top_limit or settings.MATCH_TOP_LIMIT

    async def score_group(self, group: GroupInfo, student: CharacteristicProfile) -> tuple[int, str]:
        aggregate = await self.group_store.get(group.id)
        return score_against_aggregate(student, aggregate)

    async def rank_groups_for_student(self, student_id: int) -> list[GroupRecommendation]:
        """Best eligible groups first, capped at the top limit. Ties go to the lower group id."""
        student = await self.profile_store.get_profile(student_id)
        if student is None:
            logger.info(f"Student {student_id} has no profile yet, returning empty matches")
            return []

        enrolled = await self.membership.enrolled_course_ids(student_id)
        if not enrolled:
            logger.info(f"Student {student_id} not enrolled in any courses")
            return []

        candidates = [
            g for g in await self.membership.list_groups() if GroupFilters.passes_hard_filters(g, student_id, enrolled)
        ]
        logger.info(f"Found {len(candidates)} candidate groups for student {student_id} after hard filters")

        aggregates = await asyncio.gather(*(self.group_store.get(g.id) for g in candidates))
        recommendations = []
        for group, aggregate in zip(candidates, aggregates):
            percentage, reason = score_against_aggregate(student, aggregate)
            recommendations.append(self._build(group, percentage, reason, aggregate))

        recommendations.sort(key=lambda r: (-r.match_percentage, r.group_id))
        return recommendations[: self.top_limit]

    async def score_specific_group(self, group_id: int, student_id: int) -> GroupRecommendation:
        """
        Detail view for one group. Members get a fixed 100 and students
        without a profile a fixed 50, each with its own reason.
        """
        group = await self.membership.get_group(group_id)
        if group is None:
            raise NotFoundError(f"Group not found: {group_id}")
        student = await self.profile_store.get_profile(student_id)
        return await self._score_for_detail(group, student_id, student)

    async def list_all_matches(
        self,
        student_id: int,
        course_id: int | None = None,
        visibility: str | None = None,
        availability: str | None = None,
    ) -> list[GroupRecommendation]:
        """Every browsable group, filtered and scored, in directory order without a cap."""
        enrolled = await self.membership.enrolled_course_ids(student_id)
        if not enrolled:
            logger.info(f"Student {student_id} not enrolled in any courses")
            return []

        groups = [
            g
            for g in await self.membership.list_groups()
            if GroupFilters.passes_browse_filters(g, student_id, enrolled)
            and GroupFilters.passes_soft_filters(g, course_id, visibility, availability)
        ]
        logger.info(f"Found {len(groups)} groups for student {student_id} after applying filters")

        student = await self.profile_store.get_profile(student_id)
        results = []
        for group in groups:
            try:
                results.append(await self._score_for_detail(group, student_id, student))
            except Exception as e:
                logger.exception(f"Error calculating match for group {group.id}: {e}")
        return results

    async def _score_for_detail(
        self, group: GroupInfo, student_id: int, student: CharacteristicProfile | None
    ) -> GroupRecommendation:
        aggregate = await self.group_store.get(group.id)
        is_member = group.has_member(student_id)

        if is_member:
            percentage, reason = MEMBER_SCORE, MEMBER_REASON
        elif student is None:
            percentage, reason = NO_PROFILE_SCORE, NO_PROFILE_REASON
        else:
            percentage, reason = score_against_aggregate(student, aggregate)

        return self._build(group, percentage, reason, aggregate, is_member=is_member)

    @staticmethod
    def _build(
        group: GroupInfo,
        percentage: int,
        reason: str,
        aggregate: GroupCharacteristicProfile | None,
        is_member: bool = False,
    ) -> GroupRecommendation:
        return GroupRecommendation(
            group_id=group.id,
            group_name=group.name,
            description=group.description,
            topic=group.topic,
            visibility=group.visibility,
            course_id=group.course_id,
            course_name=group.course_name,
            current_size=group.current_size,
            max_size=group.max_size,
            match_percentage=percentage,
            match_reason=reason,
            is_member=is_member,
            current_variance=aggregate.current_variance if aggregate else None,
        )
