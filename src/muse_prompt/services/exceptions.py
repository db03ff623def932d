"""Shared service-layer exceptions."""

from __future__ import annotations


class InvariantError(Exception):
    """Static catalog data violated an invariant the engine relies on."""


class EnhancementFailure(Exception):
    """Expected failure while asking the text generator for prompt enhancements."""
