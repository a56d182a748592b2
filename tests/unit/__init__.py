"""Unit tests that exercise one component at a time."""
