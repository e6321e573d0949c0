"""
Submission schemas for LearnSpace.
"""

from typing import Optional, List
from pydantic import BaseModel, Field, model_validator

from learnspace.models.submission import SubmissionLanguage
from .blocks import BlockIn


class SubmissionCreate(BaseModel):
    """
    A student's answer to a challenge.

    Blockly submissions carry ``blocks``; the server transpiles them and
    stores the generated source as ``code``.
    """
    challenge_id: int
    code: str = ""
    language: SubmissionLanguage = SubmissionLanguage.JAVASCRIPT
    assignment_id: Optional[int] = None
    blocks: Optional[List[BlockIn]] = None
    time_spent: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_source(self) -> "SubmissionCreate":
        if self.language == SubmissionLanguage.BLOCKLY:
            if not self.blocks:
                raise ValueError("blocks are required for blockly submissions")
        elif not self.code.strip():
            raise ValueError("code is required")
        return self
