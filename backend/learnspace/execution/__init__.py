"""
Code execution for LearnSpace.

- blocks: turns visual-editor blocks into JavaScript or Python source
- sandbox: runs source in an isolated child process with a time budget
"""

from .blocks import Block, BlockTemplate, BLOCK_TEMPLATES, templates_for, transpile
from .sandbox import CodeExecutor, ExecutionKind, ExecutionResult, get_executor

__all__ = [
    "Block",
    "BlockTemplate",
    "BLOCK_TEMPLATES",
    "templates_for",
    "transpile",
    "CodeExecutor",
    "ExecutionKind",
    "ExecutionResult",
    "get_executor",
]
