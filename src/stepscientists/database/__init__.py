"""Persistence schema for Step Scientists."""
