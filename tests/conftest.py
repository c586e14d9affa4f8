"""
Pytest configuration and fixtures.

Add any shared fixtures or pytest configuration here.
"""

import logging
import sys

import pytest

import dbuswrapper

from .fixtures.fake_bus import INTERFACE, SERVICE, THING_PATH, FakeBackend, FakeInterface


def pytest_configure(config):
    """Configure pytest with custom settings."""
    log_level = logging.DEBUG if config.getoption("--debug-dbuswrapper") else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("dbuswrapper").setLevel(log_level)
    logging.getLogger("asyncio").setLevel(log_level)


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--debug-dbuswrapper",
        action="store_true",
        default=False,
        help="Enable debug logging for dbuswrapper (shows patching and subscriptions)",
    )


@pytest.fixture(autouse=True)
def clean_active_backend():
    """Make sure no backend registration leaks between tests."""
    dbuswrapper.unregister_backend()
    yield
    dbuswrapper.unregister_backend()


@pytest.fixture
def thing():
    """A remote interface with one method, one property and one signal."""
    return FakeInterface(
        THING_PATH,
        methods={
            "Ping": (["s"], ["s"], lambda value: f"pong:{value}"),
            "Fail": ([], [], _raise_busy),
        },
        properties={"Version": "1.0"},
        signals=["Changed"],
    )


@pytest.fixture
def backend(thing):
    fake = FakeBackend()
    fake.publish(SERVICE, INTERFACE, thing)
    return fake


def _raise_busy():
    raise RuntimeError("org.example.Error.Busy")
