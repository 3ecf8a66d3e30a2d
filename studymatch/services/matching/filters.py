from studymatch.core.constants import VISIBILITY_PRIVATE
from studymatch.models.directory import GroupInfo


class GroupFilters:
    """Eligibility rules applied before and after scoring."""

    @staticmethod
    def in_enrolled_course(group: GroupInfo, enrolled_course_ids: set[int]) -> bool:
        return group.course_id is not None and group.course_id in enrolled_course_ids

    @staticmethod
    def passes_hard_filters(group: GroupInfo, student_id: int, enrolled_course_ids: set[int]) -> bool:
        """Ranking eligibility: enrolled course, open capacity, not a member, not private."""
        if not GroupFilters.in_enrolled_course(group, enrolled_course_ids):
            return False
        if group.is_full:
            return False
        if group.has_member(student_id):
            return False
        return group.visibility.upper() != VISIBILITY_PRIVATE

    @staticmethod
    def passes_browse_filters(group: GroupInfo, student_id: int, enrolled_course_ids: set[int]) -> bool:
        """Browse eligibility is looser: full and private groups stay visible."""
        return GroupFilters.in_enrolled_course(group, enrolled_course_ids) and not group.has_member(student_id)

    @staticmethod
    def passes_soft_filters(
        group: GroupInfo,
        course_id: int | None = None,
        visibility: str | None = None,
        availability: str | None = None,
    ) -> bool:
        """Optional user-supplied narrowing; "all" (or None) disables a filter."""
        if course_id is not None and group.course_id != course_id:
            return False

        if visibility and visibility.lower() != "all":
            if visibility.lower() != group.visibility.lower():
                return False

        if availability and availability.lower() != "all":
            if availability.lower() == "available" and group.is_full:
                return False
            if availability.lower() == "full" and not group.is_full:
                return False

        return True
