"""
Test package for the labor tracker backend application.

This package contains test suites for:
- Authentication and tenant resolution
- Employee and project management
- Single and batch time entry booking
- Work-unit summaries
- Multi-tenant data isolation
"""
