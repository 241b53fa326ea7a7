"""
Core infrastructure for Step Scientists: configuration, logging and
database session management. No game rules live here.
"""
