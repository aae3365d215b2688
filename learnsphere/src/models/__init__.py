"""Data models for the LearnSphere API.

This package contains Pydantic models for request/response validation
and the stored user, history and content documents.
"""
