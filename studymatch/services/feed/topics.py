from loguru import logger

from studymatch.core.constants import COURSE_NAME_TOPIC_SCORE
from studymatch.models.directory import SessionInfo


def normalize_topic(name: str) -> str:
    return name.strip().lower()


def topics_related(a: str, b: str) -> bool:
    """Exact or substring match on normalized names, in either direction."""
    a, b = normalize_topic(a), normalize_topic(b)
    if not a or not b:
        return False
    return a == b or a in b or b in a


def topic_match_score(session: SessionInfo, user_topics: set[str]) -> int:
    """
    Percentage of the session's topics related to any of the user's topics.

    Sessions without topics fall back to their course name: 50 when it is
    related to one of the user's topics, otherwise 0.
    """
    if not session.topics:
        if session.course_name and any(topics_related(session.course_name, t) for t in user_topics):
            return COURSE_NAME_TOPIC_SCORE
        return 0

    matched = sum(1 for topic in session.topics if any(topics_related(topic, t) for t in user_topics))
    score = int(matched * 100 / len(session.topics))
    logger.debug(f"Session {session.id}: {matched}/{len(session.topics)} topics matched, score {score}%")
    return score
