from studymatch.models.quiz import QuizOption, QuizQuestion
from studymatch.models.roles import RoleType, RoleVector


def max_role_weights(questions: list[QuizQuestion]) -> dict[RoleType, float]:
    """Highest weight any option of the given questions assigns to each role."""
    maxima = {role: 0.0 for role in RoleType}
    for question in questions:
        for option in question.options:
            for role, weight in option.role_weights.items():
                maxima[role] = max(maxima[role], weight)
    return maxima


def compute_role_vector(selected: list[QuizOption], active_questions: list[QuizQuestion]) -> RoleVector:
    """
    Additive multi-role scoring normalized against the whole quiz.

    raw[role] = sum of the selected options' weights for the role
    score[role] = raw / (max weight for the role * number of active questions)

    Dividing by the full quiz length keeps partially completed profiles on
    the same scale as complete ones. Roles no option ever weights score 0.
    """
    raw = {role: 0.0 for role in RoleType}
    for option in selected:
        for role, weight in option.role_weights.items():
            raw[role] += weight

    maxima = max_role_weights(active_questions)
    question_count = len(active_questions)
    scores = {}
    for role in RoleType:
        denominator = maxima[role] * question_count
        scores[role] = raw[role] / denominator if denominator > 0 else 0.0
    # RoleVector clamps into [0, 1]
    return RoleVector(scores=scores)
