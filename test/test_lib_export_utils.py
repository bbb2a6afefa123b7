#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#****************************************************************************************************************************************************
#* BSD 3-Clause License
#*
#* Copyright (c) 2025, Mana Battery
#* All rights reserved.
#****************************************************************************************************************************************************
"""Tests for linkagelib.export_utils module."""

import csv
import sys
import json
import asyncio
from pathlib import Path
from typing import Any

import networkx as nx
import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from linkagelib.export_utils import build_linkage_graph, export_linkage_graph, export_matrix_to_csv
from linkagelib.matrix_builder import LinkageMatrix, LinkageMatrixSession
from linkagelib.pair_store import LocalPairResultStore, pair_file_path

from conftest import A2, SCENARIO_ARTIFACTS


@pytest.fixture
def scenario_matrix(scenario_dir: Path) -> LinkageMatrix:
    (scenario_dir / pair_file_path(A2, A2)).unlink()
    return asyncio.run(LinkageMatrixSession(SCENARIO_ARTIFACTS, LocalPairResultStore(str(scenario_dir))).build())


class TestCsvExport:
    """Test CSV export of the full matrix."""

    @pytest.mark.unit
    def test_rows(self, scenario_matrix: LinkageMatrix, tmp_path: Path) -> None:
        target = tmp_path / "matrix.csv"
        export_matrix_to_csv(str(target), scenario_matrix)

        with open(target, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))

        assert rows[0] == ["Artifact", "Inherent", "Conflicting pairs", "g:a:1", "g:a:2", "g:b:1"]
        assert rows[1] == ["g:a:1", "2", "1", "(2)", "N/A", "1"]
        # Missing baseline: inherent count unknown
        assert rows[2] == ["g:a:2", "", "0", "N/A", "error", "error"]
        assert rows[3] == ["g:b:1", "2", "1", "0", "error", "(2)"]

    @pytest.mark.unit
    def test_write_failure_is_reported(self, scenario_matrix: LinkageMatrix, tmp_path: Path, capsys: Any) -> None:
        export_matrix_to_csv(str(tmp_path / "missing" / "matrix.csv"), scenario_matrix)
        assert "Failed to export CSV" in capsys.readouterr().err


class TestGraphExport:
    """Test the conflict graph."""

    @pytest.mark.unit
    def test_graph(self, scenario_matrix: LinkageMatrix) -> None:
        G = build_linkage_graph(scenario_matrix)
        assert set(G.nodes) == {"g:a:1", "g:a:2", "g:b:1"}
        assert list(G.edges(data="weight")) == [("g:a:1", "g:b:1", 1)]
        assert G.nodes["g:a:2"]["baseline_failed"] is True
        assert G.nodes["g:a:2"]["inherent"] == -1
        assert G.nodes["g:b:1"]["group_artifact"] == "g:b"

    @pytest.mark.unit
    @pytest.mark.parametrize("suffix", [".graphml", ".gexf"])
    def test_xml_formats(self, scenario_matrix: LinkageMatrix, tmp_path: Path, suffix: str) -> None:
        target = tmp_path / f"graph{suffix}"
        export_linkage_graph(str(target), scenario_matrix)
        G = nx.read_graphml(target) if suffix == ".graphml" else nx.read_gexf(target)
        assert G.number_of_nodes() == 3
        assert G.number_of_edges() == 1

    @pytest.mark.unit
    def test_json_format(self, scenario_matrix: LinkageMatrix, tmp_path: Path) -> None:
        target = tmp_path / "graph.json"
        export_linkage_graph(str(target), scenario_matrix)
        data = json.loads(target.read_text(encoding="utf-8"))
        assert {node["id"] for node in data["nodes"]} == {"g:a:1", "g:a:2", "g:b:1"}

    @pytest.mark.unit
    def test_unknown_format_defaults_to_graphml(self, scenario_matrix: LinkageMatrix, tmp_path: Path) -> None:
        target = tmp_path / "graph.dot"
        export_linkage_graph(str(target), scenario_matrix)
        assert (tmp_path / "graph.dot.graphml").exists()
