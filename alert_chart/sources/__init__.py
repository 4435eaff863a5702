"""Adapters that fetch samples and alarm history for charting."""
