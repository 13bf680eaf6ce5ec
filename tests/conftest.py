"""Shared fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_loam_logger():
    """Undo CLI logging setup so caplog sees records in every test."""
    yield
    logger = logging.getLogger("loam_iiif")
    logger.handlers[:] = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


SETTINGS_VARS = (
    "LOAM_CHAT_PROVIDER",
    "LOAM_BEDROCK_REGION",
    "LOAM_BEDROCK_MODEL",
    "LOAM_OPENAI_MODEL",
    "LOAM_MAX_NEW_TOKENS",
    "LOAM_HTTP_TIMEOUT",
    "OPENAI_API_KEY",
    "AWS_PROFILE",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """
    Start from an environment without any settings variables.

    Variables are set then deleted so that values loaded from a .env file
    during the test are removed again afterwards. The working directory is
    moved to an empty folder so no stray .env is picked up.
    """
    for name in SETTINGS_VARS:
        monkeypatch.setenv(name, "unset")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path
