"""
Pydantic request schemas for Prep Academy LMS.
"""
