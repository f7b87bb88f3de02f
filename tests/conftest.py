"""Pytest configuration and fixtures."""

import json

import pytest

import marrow.settings
from marrow.config import reset_config


@pytest.fixture(autouse=True)
def reset_config_after_test():
    """Reset global config and settings store after each test."""
    yield
    reset_config()
    marrow.settings._store = None


@pytest.fixture
def settings_path(tmp_path, monkeypatch):
    """Point the settings file at a temporary location."""
    path = tmp_path / "config" / "settings.json"
    monkeypatch.setenv("MARROW_SETTINGS_PATH", str(path))
    reset_config()
    return path


@pytest.fixture
def long_output_lines():
    """300 lines of stream output, enough to be truncated."""
    return [f"line {i}" for i in range(300)]


@pytest.fixture
def sample_notebook_data(long_output_lines):
    """Sample notebook data for testing."""
    return {
        "cells": [
            {
                "id": "intro",
                "cell_type": "markdown",
                "source": ["# Analysis\n", "\n", "Exploring `data`."],
                "metadata": {},
            },
            {
                "id": "imports",
                "cell_type": "code",
                "execution_count": 1,
                "source": "import numpy as np",
                "outputs": [],
                "metadata": {},
            },
            {
                "id": "loop",
                "cell_type": "code",
                "execution_count": 2,
                "source": "for i in range(300):\n    print(f'line {i}')",
                "outputs": [
                    {
                        "output_type": "stream",
                        "name": "stdout",
                        "text": [line + "\n" for line in long_output_lines],
                    }
                ],
                "metadata": {},
            },
            {
                "id": "plot",
                "cell_type": "code",
                "execution_count": 3,
                "source": "plt.plot([1, 2, 3])",
                "outputs": [
                    {
                        "output_type": "display_data",
                        "data": {
                            "image/png": "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg==",
                            "text/plain": ["<Figure size 640x480 with 1 Axes>"],
                        },
                        "metadata": {},
                    }
                ],
                "metadata": {},
            },
            {
                "id": "fail",
                "cell_type": "code",
                "execution_count": 4,
                "source": "raise ValueError('bad')",
                "outputs": [
                    {
                        "output_type": "error",
                        "ename": "ValueError",
                        "evalue": "bad",
                        "traceback": ["\u001b[31mValueError\u001b[0m: bad"],
                    }
                ],
                "metadata": {},
            },
            {
                "id": "results",
                "cell_type": "markdown",
                "source": "## Results",
                "metadata": {},
            },
        ],
        "metadata": {
            "kernelspec": {
                "display_name": "Python 3",
                "language": "python",
                "name": "python3",
            }
        },
        "nbformat": 4,
        "nbformat_minor": 5,
    }


@pytest.fixture
def notebook_file(tmp_path, sample_notebook_data):
    """Sample notebook written to disk."""
    path = tmp_path / "analysis.ipynb"
    path.write_text(json.dumps(sample_notebook_data), encoding="utf-8")
    return path
