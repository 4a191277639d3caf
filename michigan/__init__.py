"""Top-level package for the Michigan rummy decision engine."""

from . import bundles, cards, evaluation, rules, search, tracker

__all__ = [
    "bundles",
    "cards",
    "evaluation",
    "rules",
    "search",
    "tracker",
]
