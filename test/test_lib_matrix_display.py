#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#****************************************************************************************************************************************************
#* BSD 3-Clause License
#*
#* Copyright (c) 2025, Mana Battery
#* All rights reserved.
#****************************************************************************************************************************************************
"""Tests for linkagelib.matrix_display module."""

import io
import sys
import asyncio
from pathlib import Path
from typing import Any

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from linkagelib.diff_engine import summarize_pair
from linkagelib.inherent_errors import InherentErrorIndex
from linkagelib.linkage_types import LinkageCheckFailure, LinkageCheckSuccess, MatrixSummary, SymbolReference
from linkagelib.matrix_builder import LinkageMatrix, LinkageMatrixSession
from linkagelib.matrix_display import format_matrix, print_pair_detail, print_summary, visualize_matrix
from linkagelib.pair_store import LocalPairResultStore
from linkagelib.selection import Select, SelectionController

from conftest import A1, A2, B1, SCENARIO_ARTIFACTS


@pytest.fixture
def scenario_matrix(scenario_dir: Path) -> LinkageMatrix:
    return asyncio.run(LinkageMatrixSession(SCENARIO_ARTIFACTS, LocalPairResultStore(str(scenario_dir))).build())


class TestFormatMatrix:
    """Test terminal layout of the matrix."""

    @pytest.mark.unit
    def test_layout(self, scenario_matrix: LinkageMatrix, no_color: Any) -> None:
        lines = format_matrix(scenario_matrix)
        assert len(lines) == 2 + 3
        assert "g:a" in lines[0] and "g:b" in lines[0]
        assert lines[0].count("g:a") == 1

        row0, row1, row2 = lines[2:]
        assert row0.startswith("g:a")
        assert row1.startswith(" ")
        assert row2.startswith("g:b")
        assert row0.split()[-3:] == ["(2)", "N/A", "1"]
        assert row1.split()[-3:] == ["N/A", "(1)", "error"]
        assert row2.split()[-3:] == ["0", "error", "(2)"]

    @pytest.mark.unit
    def test_columns_align(self, scenario_matrix: LinkageMatrix, no_color: Any) -> None:
        lines = format_matrix(scenario_matrix)
        rows = lines[2:]
        positions = {row.index("[") for row in rows}
        assert len(positions) == 1

    @pytest.mark.unit
    def test_colors(self, scenario_matrix: LinkageMatrix) -> None:
        from linkagelib.color_utils import Colors

        if not Colors.RED:
            pytest.skip("colors disabled")
        row0 = format_matrix(scenario_matrix)[2]
        assert Colors.RED in row0
        assert Colors.CYAN in row0

    @pytest.mark.unit
    def test_empty_matrix(self) -> None:
        assert format_matrix(LinkageMatrix([], {}, InherentErrorIndex())) == []


class TestVisualizeMatrix:
    """Test printed matrix output."""

    @pytest.mark.unit
    def test_with_selection_and_legend(self, scenario_matrix: LinkageMatrix, no_color: Any) -> None:
        controller = SelectionController(scenario_matrix.artifacts)
        controller.dispatch(Select(A2))
        out = io.StringIO()
        visualize_matrix(scenario_matrix, controller.renderer.highlights, file=out)
        text = out.getvalue()
        assert "Linkage Check Matrix (3 artifacts)" in text
        assert "Legend:" in text
        assert "selected" in text

    @pytest.mark.unit
    def test_without_legend(self, scenario_matrix: LinkageMatrix, no_color: Any) -> None:
        out = io.StringIO()
        visualize_matrix(scenario_matrix, show_legend=False, file=out)
        assert "Legend:" not in out.getvalue()

    @pytest.mark.unit
    def test_empty_matrix_warns(self, capsys: Any) -> None:
        out = io.StringIO()
        visualize_matrix(LinkageMatrix([], {}, InherentErrorIndex()), file=out)
        assert out.getvalue() == ""
        assert "No artifacts" in capsys.readouterr().err


class TestPrintSummary:
    """Test aggregate statistics output."""

    @pytest.mark.unit
    def test_summary(self, scenario_matrix: LinkageMatrix, no_color: Any) -> None:
        out = io.StringIO()
        print_summary(scenario_matrix.summary(), {B1: "missing"}, file=out)
        text = out.getvalue()
        assert "Compared pairs:   2" in text
        assert "Conflicting:      1" in text
        assert "Error cells:      2" in text
        assert "g:b:1: missing" in text

    @pytest.mark.unit
    def test_no_conflicts(self, no_color: Any) -> None:
        out = io.StringIO()
        print_summary(MatrixSummary(2, 2, 0, 2, 0, 0, {"g:a:1": 0, "g:b:1": 0}), file=out)
        text = out.getvalue()
        assert "most conflicting" not in text
        assert "Error cells" not in text


class TestPrintPairDetail:
    """Test the detail view output."""

    def _index(self) -> InherentErrorIndex:
        return InherentErrorIndex.from_self_pairs(
            {A1: LinkageCheckSuccess(symbol_problems={"p1": []}), B1: LinkageCheckFailure("no baseline")}
        )

    @pytest.mark.unit
    def test_new_problems_with_references(self, no_color: Any) -> None:
        result = LinkageCheckSuccess(
            symbol_problems={"p1": [], "p5": [SymbolReference("com.example.Uses", "g:app:1")]},
            class_path_artifacts=["g:a:1", "g:b:1"],
        )
        out = io.StringIO()
        print_pair_detail(summarize_pair(A1, B1, result, self._index()), file=out)
        text = out.getvalue()
        assert "g:a:1 x g:b:1" in text
        assert "New symbol problems (1):" in text
        assert "com.example.Uses (g:app:1)" in text
        assert "Inherent problems of g:a:1 (1):" in text
        assert "baseline unavailable: no baseline" in text
        assert "Class path:" in text

    @pytest.mark.unit
    def test_failed_check(self, no_color: Any) -> None:
        out = io.StringIO()
        print_pair_detail(summarize_pair(A1, B1, LinkageCheckFailure("Could not resolve"), self._index()), file=out)
        assert "Linkage check unavailable: Could not resolve" in out.getvalue()

    @pytest.mark.unit
    def test_no_new_problems(self, no_color: Any) -> None:
        out = io.StringIO()
        result = LinkageCheckSuccess(symbol_problems={"p1": []})
        print_pair_detail(summarize_pair(A1, B1, result, self._index()), file=out)
        assert "No new symbol problems" in out.getvalue()
