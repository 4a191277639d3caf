"""Sanity tests ensuring the package modules import correctly."""

from __future__ import annotations

import importlib

import pytest


@pytest.mark.parametrize(
    "module_name",
    [
        "michigan",
        "michigan.cards",
        "michigan.encoding",
        "michigan.bundles",
        "michigan.rules",
        "michigan.search",
        "michigan.tracker",
        "michigan.evaluation",
        "michigan.state",
        "michigan.actions",
        "michigan.scoreboard",
        "michigan.simulate",
        "michigan.cli.main",
    ],
)
def test_modules_import(module_name: str) -> None:
    """Ensure all foundational modules can be imported."""

    assert importlib.import_module(module_name)
