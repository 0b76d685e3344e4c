"""Data models for test results, configuration and run history."""
