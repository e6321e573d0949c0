"""
Code execution schemas for LearnSpace.

Fields are loosely typed on purpose: a missing or non-string ``code`` is
reported by the executor as a 400 rather than rejected as a 422.
"""

from typing import Any, Optional
from pydantic import BaseModel


class ExecuteRequest(BaseModel):
    code: Any = None
    language: Any = "javascript"
    stdin: Optional[str] = None


class ExecuteResponse(BaseModel):
    success: bool
    output: Optional[str] = None
    error: Optional[str] = None
