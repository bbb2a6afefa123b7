#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#****************************************************************************************************************************************************
#* BSD 3-Clause License
#*
#* Copyright (c) 2025, Mana Battery
#* All rights reserved.
#****************************************************************************************************************************************************
"""Pytest configuration and shared fixtures for linkageCheck tests.

The scenario used across the suite has three artifacts in matrix order:

    [0] g:a:1   inherent {p1, p2}
    [1] g:a:2   inherent {p3}
    [2] g:b:1   inherent {p2, p4}

Cross pair files:
    g:a:1 x g:b:1  -> {p1, p2, p4, p5}   (1 new problem: p5)
    g:b:1 x g:a:1  -> {p1, p4}           (0 new problems)
    g:a:2 x g:b:1  -> missing            (error)
    g:b:1 x g:a:2  -> check failed       (error)

g:a:1 and g:a:2 are versions of one artifact, so no file exists for them.
"""

import os
import sys
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from linkagelib.coordinates import ArtifactCoordinate, parse
from linkagelib.pair_store import pair_file_path


A1 = parse("g:a:1")
A2 = parse("g:a:2")
B1 = parse("g:b:1")
SCENARIO_ARTIFACTS = [A1, A2, B1]
BOM = parse("com.example:bom:1.0")


def problems(*keys: str, referencing: str = "com.example.App") -> Dict[str, List[Dict[str, str]]]:
    """Build a symbolProblems object with one referencing class per key."""
    return {key: [{"className": referencing, "coordinates": "g:app:1"}] for key in keys}


def write_pair(
    root: Path, a: ArtifactCoordinate, b: ArtifactCoordinate, document: Dict[str, Any], namespace: Optional[ArtifactCoordinate] = None
) -> Path:
    """Write one pair result document where the local store expects it."""
    path = root.joinpath(*pair_file_path(a, b, namespace).split("/"))
    os.makedirs(path.parent, exist_ok=True)
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def write_scenario(root: Path, namespace: Optional[ArtifactCoordinate] = None) -> Path:
    write_pair(root, A1, A1, {"symbolProblems": problems("p1", "p2")}, namespace)
    write_pair(root, A2, A2, {"symbolProblems": problems("p3")}, namespace)
    write_pair(root, B1, B1, {"symbolProblems": problems("p2", "p4")}, namespace)
    write_pair(
        root,
        A1,
        B1,
        {"symbolProblems": problems("p1", "p2", "p4", "p5", referencing="com.example.Uses"), "classPathArtifacts": ["g:a:1", "g:b:1"]},
        namespace,
    )
    write_pair(root, B1, A1, {"symbolProblems": problems("p1", "p4")}, namespace)
    write_pair(root, B1, A2, {"error": "Could not resolve g:b:1"}, namespace)
    return root


@pytest.fixture
def scenario_dir(tmp_path: Path) -> Path:
    """Data directory holding the scenario pair results without a namespace."""
    return write_scenario(tmp_path / "data")


@pytest.fixture
def bom_scenario_dir(tmp_path: Path) -> Path:
    """Data directory holding the scenario pair results under the BOM namespace."""
    return write_scenario(tmp_path / "data", BOM)


@pytest.fixture
def no_color() -> Any:
    """Strip color codes for the duration of a test."""
    from linkagelib.color_utils import Colors

    saved = {attr: getattr(Colors, attr) for attr in dir(Colors) if not attr.startswith("_") and attr != "disable"}
    Colors.disable()
    yield
    for attr, value in saved.items():
        setattr(Colors, attr, value)
