#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#****************************************************************************************************************************************************
#* BSD 3-Clause License
#*
#* Copyright (c) 2025, Mana Battery
#* All rights reserved.
#****************************************************************************************************************************************************
"""Tests for linkagelib.package_verification module."""

import sys
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from linkagelib.constants import EXIT_RUNTIME_ERROR
from linkagelib.package_verification import (
    PACKAGE_REQUIREMENTS,
    REQUIRED_PACKAGES,
    check_all_packages,
    check_package_version,
    main,
    require_package,
)


@pytest.mark.unit
class TestCheckPackageVersion:
    """Test check_package_version function."""

    @pytest.mark.unit
    def test_check_installed_meets_version(self) -> None:
        """Test checking an installed package that meets version requirement."""
        is_installed, meets_version, installed_ver = check_package_version("httpx", "0.1.0", raise_on_error=False)

        assert is_installed is True
        assert meets_version is True
        assert installed_ver

    @pytest.mark.unit
    def test_check_installed_below_version(self) -> None:
        is_installed, meets_version, installed_ver = check_package_version("networkx", "999.0.0", raise_on_error=False)

        assert is_installed is True
        assert meets_version is False
        assert installed_ver is not None

    @pytest.mark.unit
    def test_check_not_installed(self) -> None:
        assert check_package_version("nonexistent_package_xyz123", "1.0.0", raise_on_error=False) == (False, False, None)

    @pytest.mark.unit
    def test_check_raise_on_missing_package(self) -> None:
        with pytest.raises(ImportError, match="is not installed"):
            check_package_version("nonexistent_package_xyz123", "1.0.0", raise_on_error=True)

    @pytest.mark.unit
    def test_check_raise_on_old_version(self) -> None:
        with pytest.raises(ImportError, match="is too old"):
            check_package_version("Jinja2", "999.0.0", raise_on_error=True)

    @pytest.mark.unit
    def test_check_unknown_package_no_version(self) -> None:
        """Test that ValueError is raised for a package without a registered requirement."""
        with pytest.raises(ValueError, match="No version requirement"):
            check_package_version("nonexistent_package_xyz123")


@pytest.mark.unit
class TestRequirePackage:
    """Test require_package function."""

    @pytest.mark.unit
    def test_installed_package(self) -> None:
        require_package("packaging", "tests")

    @pytest.mark.unit
    def test_unknown_package_exits(self, capsys: Any) -> None:
        with pytest.raises(SystemExit) as exc_info:
            require_package("nonexistent_package_xyz123")
        assert exc_info.value.code == EXIT_RUNTIME_ERROR

    @pytest.mark.unit
    def test_too_old_package_exits(self, capsys: Any) -> None:
        with patch.dict(PACKAGE_REQUIREMENTS, {"httpx": "999.0.0"}):
            with pytest.raises(SystemExit) as exc_info:
                require_package("httpx", "HTTP pair results")
        assert exc_info.value.code == EXIT_RUNTIME_ERROR
        assert "too old for HTTP pair results" in capsys.readouterr().err


@pytest.mark.unit
class TestCheckAllPackages:
    """Test the dependency report."""

    @pytest.mark.unit
    def test_registry_is_consistent(self) -> None:
        assert set(REQUIRED_PACKAGES) == set(PACKAGE_REQUIREMENTS)

    @pytest.mark.unit
    def test_all_installed(self, capsys: Any) -> None:
        assert check_all_packages() is True
        assert "All required packages are available" in capsys.readouterr().out

    @pytest.mark.unit
    def test_main_check_all(self, capsys: Any) -> None:
        with patch.object(sys, "argv", ["package_verification.py", "--check-all"]):
            assert main() == 0
