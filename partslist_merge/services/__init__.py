"""Merge pipeline services."""
