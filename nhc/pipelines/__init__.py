"""
NHC Pipelines.

Business logic orchestration functions.
"""
