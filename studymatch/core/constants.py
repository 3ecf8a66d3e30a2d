"""
Core constants used across the application. Keep these simple and documented.
"""

from typing import Final

# Redis key templates (prefixed with settings.REDIS_KEY_PREFIX)
PROFILE_KEY: Final[str] = "profile:{user_id}"
ANSWERS_KEY: Final[str] = "answers:{user_id}"
GROUP_PROFILE_KEY: Final[str] = "group_profile:{group_id}"
QUESTION_KEY: Final[str] = "quiz:question:{question_id}"
QUESTION_INDEX_KEY: Final[str] = "quiz:questions"
QUIZ_CONFIG_KEY: Final[str] = "quiz:config"
QUIZ_SEQUENCE_KEY: Final[str] = "quiz:sequence"

# Matching fallbacks (percentages)
NEW_GROUP_SCORE: Final[int] = 75
MEMBER_SCORE: Final[int] = 100
NO_PROFILE_SCORE: Final[int] = 50

NEW_GROUP_REASON: Final[str] = "New group - be a founding member!"
MEMBER_REASON: Final[str] = "You are a member of this group"
NO_PROFILE_REASON: Final[str] = "Complete your profile quiz to see how well you fit"

# Similarity bands, checked top-down: (minimum similarity, reason)
MATCH_REASON_BANDS: Final[list[tuple[float, str]]] = [
    (0.85, "Perfect fit - you complete this team"),
    (0.70, "Excellent match - fills key gaps"),
    (0.55, "Good match - complements strengths"),
    (0.40, "Moderate match - some overlap"),
]
MATCH_REASON_FALLBACK: Final[str] = "Different strengths - group already covers your areas"

# Group visibility values understood by the membership directory
VISIBILITY_PRIVATE: Final[str] = "PRIVATE"

# Feed item priorities (lower number = higher priority)
PRIORITY_QUIZ_REMINDER: Final[int] = 1
PRIORITY_UPCOMING_EVENT: Final[int] = 2
PRIORITY_GROUP_MATCH: Final[int] = 3
PRIORITY_REGISTERED_SESSION: Final[int] = 4
PRIORITY_RECOMMENDED_SESSION: Final[int] = 5

# Slots after the quiz reminder reserved for one item of each category
FEED_DIVERSITY_SLOTS: Final[int] = 3

# Recommended sessions
ENROLLED_COURSE_SESSION_FLOOR: Final[int] = 75
COURSE_NAME_TOPIC_SCORE: Final[int] = 50
