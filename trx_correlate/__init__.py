"""Correlate TRX test results with the source files failing tests exercise."""
