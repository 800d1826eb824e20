"""
Shared helpers for URLs, paths and display formatting.
"""
