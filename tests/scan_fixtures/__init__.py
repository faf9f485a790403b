"""Modules scanned by the test suite."""
