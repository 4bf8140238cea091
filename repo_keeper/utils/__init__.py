"""Shared utilities for repo-keeper."""
