"""Filters selecting the occurrences of one page load."""

from .scope_resolver import ScopeResolver, DUPLICATED_BOOKKEEPING_NAMES

__all__ = ["ScopeResolver", "DUPLICATED_BOOKKEEPING_NAMES"]
