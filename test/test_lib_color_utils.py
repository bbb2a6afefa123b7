#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#****************************************************************************************************************************************************
#* BSD 3-Clause License
#*
#* Copyright (c) 2025, Mana Battery
#* All rights reserved.
#****************************************************************************************************************************************************
"""Tests for linkagelib.color_utils module."""

import io
import sys
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from linkagelib.color_utils import Colors, colored, print_error, print_success, print_warning, should_use_color


class TestColored:
    """Tests for colored function."""

    def test_with_color(self) -> None:
        result = colored("test", "<c>", "<s>")
        assert result == f"<s><c>test{Colors.RESET}"

    def test_no_color(self) -> None:
        assert colored("test", "", "") == "test"


class TestPrintFunctions:
    """Tests for print_* convenience functions."""

    def test_print_success(self) -> None:
        output = io.StringIO()
        print_success("Computed matrix", file=output, prefix=True)
        assert "Success: Computed matrix" in output.getvalue()

    def test_print_error_defaults_to_stderr(self, capsys: Any) -> None:
        print_error("bad coordinate")
        captured = capsys.readouterr()
        assert "Error: bad coordinate" in captured.err
        assert captured.out == ""

    def test_print_warning_without_prefix(self) -> None:
        output = io.StringIO()
        print_warning("excluded", file=output, prefix=False)
        assert "Warning" not in output.getvalue()
        assert "excluded" in output.getvalue()


class TestShouldUseColor:
    """Tests for should_use_color function."""

    def test_flags(self) -> None:
        assert should_use_color(no_color=True) is False
        assert should_use_color(force_color=True) is True
        assert should_use_color(force_color=True, no_color=True) is False

    def test_not_a_tty(self) -> None:
        with patch.object(sys, "stdout", io.StringIO()):
            assert should_use_color() is False

    def test_no_color_environment(self) -> None:
        fake_stdout = io.StringIO()
        fake_stdout.isatty = lambda: True  # type: ignore[method-assign]
        with patch.object(sys, "stdout", fake_stdout), patch.dict("os.environ", {"NO_COLOR": "1"}):
            assert should_use_color() is False
        with patch.object(sys, "stdout", fake_stdout), patch.dict("os.environ", {}, clear=True):
            assert should_use_color() is True


class TestDisable:
    """Tests for Colors.disable."""

    def test_disable(self, no_color: Any) -> None:
        assert Colors.RED == ""
        assert Colors.RESET == ""
        assert colored("x", Colors.RED) == "x"
