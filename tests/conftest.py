"""
Pytest configuration for local imports and shared label fixtures.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

import zpl_label_kit.config  # noqa: E402


#============================================
@pytest.fixture
def stock_2x1() -> zpl_label_kit.config.Stock:
	"""
	Two by one inch die-cut stock.
	"""
	return zpl_label_kit.config.STANDARD_STOCKS["roll_2x1"]


#============================================
@pytest.fixture
def zd620_203() -> zpl_label_kit.config.Device:
	"""
	ZD620 at 203 dpi.
	"""
	return zpl_label_kit.config.build_device("ZD620", 203)
