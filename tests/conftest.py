"""Shared test fixtures for the OCR post-processing test suite."""

from pathlib import Path

import pytest

from src.utils.config import AppConfig


@pytest.fixture
def statement_text() -> str:
    """A short bank statement as an OCR provider would return it."""
    return (
        "FIRST NATIONAL BANK\n"
        "Statement Period: 01/01/2024 - 01/31/2024\n"
        "\n"
        "01/05/2024  Grocery purchase  45.20\n"
        "01/15/2024  Direct deposit  2,000.00\n"
        "\n"
        "Ending Balance as of 01/31/2024: $1,500.00"
    )


@pytest.fixture
def filler() -> str:
    """Six long lines that keep tokens out of each other's proximity windows."""
    return "\n".join(["-" * 60] * 6)


@pytest.fixture
def app_config() -> AppConfig:
    """Default application configuration, independent of files on disk."""
    return AppConfig()


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
