"""
NHC Services.

All service classes organized by feature.
"""
