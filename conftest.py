"""Root conftest: the ``slow`` marker and its ``--run-slow`` opt-in."""

from __future__ import annotations

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Also run exhaustive sweeps marked @pytest.mark.slow.",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: exhaustive sweep, opt in with --run-slow")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-slow"):
        return
    skip = pytest.mark.skip(reason="needs --run-slow")
    for item in items:
        if item.get_closest_marker("slow") is not None:
            item.add_marker(skip)
