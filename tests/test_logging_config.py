"""
Tests for the logging configuration's log directory.
"""

import os

import pytest

import metrics_sample
from metrics_sample.core import logging_config


@pytest.mark.skipif(bool(os.getenv("LOG_DIR")), reason="LOG_DIR overrides the package log directory")
def test_log_dir_is_tied_to_package_location():
    package_dir = os.path.dirname(os.path.abspath(metrics_sample.__file__))

    assert logging_config.LOG_DIR == os.path.join(package_dir, "config", "logs")
    assert os.path.dirname(logging_config.LOG_FILE) == logging_config.LOG_DIR
    assert os.path.isdir(logging_config.LOG_DIR)


def test_log_dir_independent_of_working_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert os.path.isabs(logging_config.LOG_DIR)
    assert not (tmp_path / "logs").exists()
