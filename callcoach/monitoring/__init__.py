"""Monitoring for the quality engine."""
