"""Shared fixtures for tests. HTTP is faked with requests-mock."""

from __future__ import annotations

import logging

import pytest
import requests_mock
import structlog

from api_client import TraktClient
from logger import LOGGER_NAMESPACE
from settings import Settings

API_KEY = "foobar"
TARGET = "http://api.trakt.tv/foo/bar.json"


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def req_mock():
    with requests_mock.Mocker() as mocker:
        yield mocker


@pytest.fixture
def trakt(settings):
    with TraktClient(settings=settings) as client:
        client.set_api_key(API_KEY)
        yield client


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()
    logger = logging.getLogger(LOGGER_NAMESPACE)
    for handler in [h for h in logger.handlers if h.get_name() == LOGGER_NAMESPACE]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
