"""
Pydantic schemas for API request/response validation.

Provides data models for all API endpoints including authentication,
employee and project CRUD, time entry booking and summaries.
"""
