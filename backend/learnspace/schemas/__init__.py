"""
Pydantic schemas for LearnSpace request and response bodies.
"""
