"""
LearnSpace backend: courses, coding challenges, a block editor and a
sandboxed code runner for classrooms.
"""

__version__ = "1.0.0"
