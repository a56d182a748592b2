"""
Endpoint test package for the task tracker.

Tests use the Flask test client and cover:
- Cookie and bearer authentication flows
- Role and ownership authorization
- Input validation and the error envelope
"""
