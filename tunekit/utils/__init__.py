"""Shared utility functions for the tunekit package."""
