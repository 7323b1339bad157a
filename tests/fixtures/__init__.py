"""Test fixtures: mock services for pipeline tests."""
