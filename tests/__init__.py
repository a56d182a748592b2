"""
Test suite for the task tracker.

This package contains:
- unit/: token service, auth gate, models, repositories, services, config
- integration/: HTTP endpoints and CLI driven through the Flask app
"""
