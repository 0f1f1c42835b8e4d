"""
GymBuddy Tests

Unit tests live in tests/unit and need no running services: the
scheduling API and Anthropic are mocked.

Running Tests:
    pip install -e ".[test]"
    pytest tests/unit -v
"""
