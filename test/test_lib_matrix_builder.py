#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#****************************************************************************************************************************************************
#* BSD 3-Clause License
#*
#* Copyright (c) 2025, Mana Battery
#* All rights reserved.
#****************************************************************************************************************************************************
"""Tests for linkagelib.matrix_builder module."""

import sys
import random
import asyncio
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from linkagelib.constants import NotFoundError
from linkagelib.coordinates import ArtifactCoordinate, parse
from linkagelib.linkage_types import CellOutcome, HeaderSpan
from linkagelib.matrix_builder import LinkageMatrixSession, build_header_spans
from linkagelib.pair_store import LocalPairResultStore, PairResultStore, pair_file_path

from conftest import A1, A2, B1, BOM, SCENARIO_ARTIFACTS


class DelayedStore(PairResultStore):
    """In-memory store that resolves fetches after per-path delays."""

    def __init__(self, documents: Dict[str, Any], delays: Dict[str, float]):
        super().__init__()
        self.documents = documents
        self.delays = delays
        self.requested: List[str] = []

    async def _load_json(self, path: str) -> Any:
        self.requested.append(path)
        await asyncio.sleep(self.delays.get(path, 0))
        if path not in self.documents:
            raise NotFoundError(f"Pair result not found: {path}", path)
        return self.documents[path]


def build(artifacts: List[ArtifactCoordinate], store: PairResultStore) -> Tuple[Any, List[Tuple[int, int, CellOutcome]]]:
    completed: List[Tuple[int, int, CellOutcome]] = []
    session = LinkageMatrixSession(artifacts, store)
    matrix = asyncio.run(session.build(on_cell=lambda i, j, outcome: completed.append((i, j, outcome))))
    return matrix, completed


class TestHeaderSpans:
    """Test merging of adjacent group:artifact headers."""

    @pytest.mark.unit
    def test_adjacent_versions_merge(self) -> None:
        spans = build_header_spans(SCENARIO_ARTIFACTS)
        assert spans == [HeaderSpan("g:a", 2, 0), HeaderSpan("g:b", 1, 2)]

    @pytest.mark.unit
    def test_non_adjacent_versions_do_not_merge(self) -> None:
        spans = build_header_spans([A1, B1, A2])
        assert [(s.key, s.span) for s in spans] == [("g:a", 1), ("g:b", 1), ("g:a", 1)]

    @pytest.mark.unit
    def test_spans_cover_every_index(self) -> None:
        artifacts = [parse(text) for text in ("g:a:1", "g:a:2", "g:a:3", "g:b:1", "h:a:1", "h:a:2")]
        spans = build_header_spans(artifacts)
        assert sum(s.span for s in spans) == len(artifacts)
        assert [s.start_index for s in spans] == [0, 3, 4]

    @pytest.mark.unit
    def test_empty(self) -> None:
        assert build_header_spans([]) == []


class TestScenarioMatrix:
    """Build the shared scenario from a data directory."""

    @pytest.mark.unit
    def test_cells(self, scenario_dir: Path) -> None:
        matrix, _ = build(SCENARIO_ARTIFACTS, LocalPairResultStore(str(scenario_dir)))
        values = [[c.display_value for c in matrix.row(i)] for i in range(matrix.size)]
        assert values == [
            ["(2)", "N/A", "1"],
            ["N/A", "(1)", "error"],
            ["0", "error", "(2)"],
        ]
        assert matrix.cell(0, 2).is_flagged
        assert not matrix.cell(2, 0).is_flagged
        assert matrix.cell(2, 1).message == "Could not resolve g:b:1"

    @pytest.mark.unit
    def test_every_cell_reported_once(self, scenario_dir: Path) -> None:
        matrix, completed = build(SCENARIO_ARTIFACTS, LocalPairResultStore(str(scenario_dir)))
        keys = [(i, j) for i, j, _ in completed]
        assert sorted(keys) == sorted(matrix.cells)
        assert len(keys) == len(set(keys)) == 9

    @pytest.mark.unit
    def test_versions_of_one_artifact_never_fetched(self, scenario_dir: Path) -> None:
        store = LocalPairResultStore(str(scenario_dir))
        build(SCENARIO_ARTIFACTS, store)
        # 3 self-pairs + 4 cross pairs; g:a:1 x g:a:2 is never requested
        assert store.fetch_count == 7

    @pytest.mark.unit
    def test_namespace(self, bom_scenario_dir: Path) -> None:
        matrix, _ = build(SCENARIO_ARTIFACTS, LocalPairResultStore(str(bom_scenario_dir), namespace=BOM))
        assert matrix.namespace == BOM
        assert matrix.cell(0, 2).display_value == "1"

    @pytest.mark.unit
    def test_summary(self, scenario_dir: Path) -> None:
        matrix, _ = build(SCENARIO_ARTIFACTS, LocalPairResultStore(str(scenario_dir)))
        summary = matrix.summary()
        assert summary.artifact_count == 3
        assert summary.compared_pairs == 2
        assert summary.conflicting_pairs == 1
        assert summary.non_conflicting_pairs == 1
        assert summary.error_cells == 2
        assert summary.not_applicable_cells == 2
        assert summary.conflicts_per_artifact == {"g:a:1": 1, "g:a:2": 0, "g:b:1": 1}

    @pytest.mark.unit
    def test_failed_self_pair(self, scenario_dir: Path) -> None:
        """A missing baseline turns the diagonal into an error and hides nothing."""
        (scenario_dir / pair_file_path(B1, B1)).unlink()
        matrix, _ = build(SCENARIO_ARTIFACTS, LocalPairResultStore(str(scenario_dir)))

        assert matrix.cell(2, 2).display_value == "error"
        assert matrix.cell(2, 2).is_self_pair
        assert B1 in matrix.index.failures
        # {p1, p2, p4, p5} minus inherent(g:a:1) = {p1, p2}
        assert matrix.cell(0, 2).display_value == "2"
        # {p1, p4} minus {p1, p2}
        assert matrix.cell(2, 0).display_value == "1"

    @pytest.mark.unit
    def test_undecodable_self_pair(self, scenario_dir: Path) -> None:
        (scenario_dir / pair_file_path(B1, B1)).write_bytes(b'{"symbolProblems": {"\xff": []}}')
        matrix, _ = build(SCENARIO_ARTIFACTS, LocalPairResultStore(str(scenario_dir)))

        assert matrix.cell(2, 2).is_error
        assert "Invalid JSON" in matrix.cell(2, 2).message
        assert matrix.cell(0, 2).display_value == "2"

    @pytest.mark.unit
    def test_undecodable_cross_pair(self, scenario_dir: Path) -> None:
        (scenario_dir / pair_file_path(A1, B1)).write_bytes(b'{"symbolProblems": {"\xff": []}}')
        matrix, _ = build(SCENARIO_ARTIFACTS, LocalPairResultStore(str(scenario_dir)))

        assert matrix.cell(0, 2).is_error
        assert matrix.cell(2, 0).display_value == "0"
        assert matrix.cell(2, 2).display_value == "(2)"

    @pytest.mark.unit
    def test_duplicated_artifact_fetches_each_pair_once(self, scenario_dir: Path) -> None:
        store = LocalPairResultStore(str(scenario_dir))
        matrix, _ = build([A1, B1, A1], store)

        # Self-pairs of g:a:1 and g:b:1 plus g:a:1 x g:b:1 in both orders
        assert store.fetch_count == 4
        assert matrix.cell(0, 1).display_value == matrix.cell(2, 1).display_value == "1"
        assert matrix.cell(1, 0).display_value == matrix.cell(1, 2).display_value == "0"


class TestOutOfOrderCompletion:
    """Cells complete in fetch order, yet the matrix is deterministic."""

    def _documents(self, artifacts: List[ArtifactCoordinate]) -> Dict[str, Any]:
        documents: Dict[str, Any] = {}
        for i, a in enumerate(artifacts):
            documents[pair_file_path(a, a)] = {"symbolProblems": {f"own{i}": []}}
            for b in artifacts:
                if a != b:
                    documents[pair_file_path(a, b)] = {"symbolProblems": {f"own{i}": [], f"new-{a.artifact}-{b.artifact}": []}}
        return documents

    @pytest.mark.unit
    def test_reverse_completion_order(self) -> None:
        artifacts = [parse("g:a:1"), parse("g:b:1"), parse("g:c:1")]
        documents = self._documents(artifacts)
        # Later cells resolve first
        delays = {path: 0.05 - n * 0.005 for n, path in enumerate(sorted(documents))}
        matrix, completed = build(artifacts, DelayedStore(documents, delays))

        cross = [(i, j) for i, j, outcome in completed if not outcome.is_self_pair]
        assert cross != sorted(cross)
        for (i, j), outcome in matrix.cells.items():
            assert outcome.display_value == ("(1)" if i == j else "1")

    @pytest.mark.unit
    def test_random_delays_same_result(self) -> None:
        artifacts = [parse(f"g:a{n}:1") for n in range(4)]
        documents = self._documents(artifacts)
        rng = random.Random(1234)

        results = []
        for _ in range(3):
            delays = {path: rng.uniform(0, 0.01) for path in documents}
            matrix, _ = build(artifacts, DelayedStore(documents, delays))
            results.append({key: outcome.display_value for key, outcome in matrix.cells.items()})
        assert results[0] == results[1] == results[2]

    @pytest.mark.unit
    def test_self_pairs_complete_before_cross_pairs_start(self) -> None:
        artifacts = [parse("g:a:1"), parse("g:b:1")]
        documents = self._documents(artifacts)
        slow_self = {pair_file_path(a, a): 0.03 for a in artifacts}
        store = DelayedStore(documents, slow_self)
        build(artifacts, store)

        self_paths = {pair_file_path(a, a) for a in artifacts}
        assert set(store.requested[:2]) == self_paths

    @pytest.mark.unit
    def test_fill_requires_index(self) -> None:
        session = LinkageMatrixSession([A1], DelayedStore({}, {}))
        with pytest.raises(RuntimeError):
            asyncio.run(session.fill_cells())

    @pytest.mark.unit
    def test_missing_cross_pair_is_error_cell(self) -> None:
        artifacts = [parse("g:a:1"), parse("g:b:1")]
        documents = self._documents(artifacts)
        del documents[pair_file_path(artifacts[0], artifacts[1])]
        session = LinkageMatrixSession(artifacts, DelayedStore(documents, {}))
        matrix = asyncio.run(session.build())

        assert matrix.cell(0, 1).is_error
        assert (0, 1) in session.failures
        assert matrix.cell(1, 0).display_value == "1"
