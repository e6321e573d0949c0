"""
Service layer for LearnSpace.

- badges: automatic badge rules
- progress: per-course progress records
- grading: runs submissions through the sandbox
- assignments: per-student assignment status and CSV export
"""
