"""
Course and challenge schemas for LearnSpace.
"""

from typing import Annotated, Optional, List, Literal
from pydantic import BaseModel, Field

from learnspace.core.config import settings
from learnspace.models.course import DifficultyLevel, ChallengeDifficulty


GradeLevel = Annotated[int, Field(ge=1, le=13)]


class Lesson(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    order: int = 0
    content: Optional[str] = None


class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    image: Optional[str] = Field(None, max_length=500)
    target_grades: List[GradeLevel] = Field(..., min_length=1)
    difficulty: DifficultyLevel = DifficultyLevel.BEGINNER
    topics: List[str] = []
    lessons: List[Lesson] = []
    is_published: bool = False


class TestCase(BaseModel):
    """One input/expected-output pair used to grade a submission."""

    input: str = ""
    expected_output: str
    description: Optional[str] = None


class ChallengeCreate(BaseModel):
    course_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    difficulty: ChallengeDifficulty = ChallengeDifficulty.EASY
    objectives: List[str] = []
    instructions: Optional[str] = None
    initial_code: str = ""
    expected_output: Optional[str] = None
    test_cases: List[TestCase] = []
    hints: List[str] = []
    gamification_points: int = Field(settings.DEFAULT_CHALLENGE_POINTS, ge=0)
    time_limit: Optional[int] = Field(None, ge=1)
    is_block_based: bool = True
    language: Literal["javascript", "python"] = "python"
    order_index: int = Field(0, ge=0)
    is_published: bool = True
