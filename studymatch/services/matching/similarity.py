import math

from studymatch.core.constants import MATCH_REASON_BANDS, MATCH_REASON_FALLBACK
from studymatch.models.roles import RoleType, RoleVector


def average_vector(vectors: list[RoleVector]) -> RoleVector:
    """Per-role arithmetic mean; all zeros for an empty list."""
    if not vectors:
        return RoleVector.zeros()
    count = len(vectors)
    return RoleVector(scores={role: sum(v.get(role) for v in vectors) / count for role in RoleType})


def balance_variance(vectors: list[RoleVector], average: RoleVector) -> float:
    """
    Population variance of member scores around the group average,
    computed per role and then averaged over all roles.
    """
    if not vectors:
        return 0.0
    count = len(vectors)
    total = 0.0
    for role in RoleType:
        mean = average.get(role)
        total += sum((v.get(role) - mean) ** 2 for v in vectors) / count
    return total / len(RoleType)


def complementary_vector(group_average: RoleVector) -> RoleVector:
    """What the group lacks: 1 - average for every role."""
    return group_average.complement()


def cosine_similarity(a: RoleVector, b: RoleVector) -> float:
    """Cosine of the angle between two role vectors, clamped to [0, 1].

    Degenerate (zero-norm) vectors never match.
    """
    norm_a = a.norm()
    norm_b = b.norm()
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    similarity = a.dot(b) / (norm_a * norm_b)
    if math.isnan(similarity):
        return 0.0
    return max(0.0, min(1.0, similarity))


def complementary_similarity(student: RoleVector, group_average: RoleVector) -> float:
    """How well a student fills the roles a group is weak in."""
    return cosine_similarity(student, complementary_vector(group_average))


def to_percentage(similarity: float) -> int:
    """Scale [0, 1] to an integer percentage, rounding halves up."""
    return int(math.floor(similarity * 100 + 0.5))


def match_reason(similarity: float) -> str:
    for threshold, reason in MATCH_REASON_BANDS:
        if similarity >= threshold:
            return reason
    return MATCH_REASON_FALLBACK
