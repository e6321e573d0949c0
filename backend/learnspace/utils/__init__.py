"""Small shared helpers for LearnSpace."""
