"""
Automatic badge rules for LearnSpace.

Each rule looks at one course's Progress record. Rules never award the same
badge twice within a course.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from learnspace.models.badge import BadgeCategory
from learnspace.models.progress import Progress


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BadgeRule:
    name: str
    description: str
    icon: str
    category: str
    required_points: int = 0
    required_challenges: int = 0
    # Rule matches only at exactly this many completions
    exact_challenges: Optional[int] = None

    def is_met(self, progress: Progress) -> bool:
        completed = len(progress.completed_challenges)
        if self.exact_challenges is not None and completed != self.exact_challenges:
            return False
        if completed < self.required_challenges:
            return False
        return (progress.total_points or 0) >= self.required_points


DEFAULT_BADGES = (
    BadgeRule(
        name="First Steps",
        description="Completed your first challenge",
        icon="\U0001F476",
        category=BadgeCategory.COMPLETION.value,
        required_challenges=1,
        exact_challenges=1,
    ),
    BadgeRule(
        name="Challenge Master",
        description="Completed 10 challenges",
        icon="\U0001F3C5",
        category=BadgeCategory.MASTERY.value,
        required_challenges=10,
    ),
    BadgeRule(
        name="Point Collector",
        description="Earned 100 points",
        icon="\U0001F4B0",
        category=BadgeCategory.COMPLETION.value,
        required_points=100,
    ),
    BadgeRule(
        name="Rising Star",
        description="Earned 500 points",
        icon="\U0001F31F",
        category=BadgeCategory.SPECIAL.value,
        required_points=500,
    ),
)


def check_badges(progress: Progress) -> List[str]:
    """
    Award every default badge whose rule is met and not yet earned.

    Args:
        progress: Progress record to evaluate; modified in place

    Returns:
        List[str]: Names of badges awarded by this call, in rule order
    """
    awarded = []
    for rule in DEFAULT_BADGES:
        if rule.is_met(progress) and progress.award_badge(rule.name, rule.description):
            awarded.append(rule.name)

    if awarded:
        logger.info(
            f"Student {progress.student_id} earned {', '.join(awarded)} in course {progress.course_id}"
        )
    return awarded
