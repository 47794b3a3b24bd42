"""Scheduled and one-off database jobs."""
