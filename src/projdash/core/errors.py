"""Errors surfaced by the project store."""

from __future__ import annotations


class ProjectStoreError(Exception):
    """Base class for failed store operations."""


class ValidationError(ProjectStoreError):
    """A required field is empty."""


class DuplicateError(ProjectStoreError):
    """Another project already holds the project code."""


class SyncError(ProjectStoreError):
    """The repository call failed."""
