#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Export utilities for writing linkage check matrices to various file formats."""

import os
import csv
import json
import logging
from typing import Any

import networkx as nx
from networkx.readwrite import json_graph

from .color_utils import print_error, print_success
from .constants import SUPPORTED_GRAPH_FORMATS
from .coordinates import group_artifact_key
from .matrix_builder import LinkageMatrix

logger = logging.getLogger(__name__)


def export_matrix_to_csv(filename: str, matrix: LinkageMatrix) -> None:
    """Export the full matrix to a CSV file.

    One row per artifact with its inherent problem count, conflicting pair count
    and the display value of every cell.

    Args:
        filename: Output CSV filename
        matrix: Computed matrix
    """
    summary = matrix.summary()
    labels = [str(a) for a in matrix.artifacts]
    try:
        with open(filename, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)

            writer.writerow(["Artifact", "Inherent", "Conflicting pairs"] + labels)

            for i, artifact in enumerate(matrix.artifacts):
                inherent = len(matrix.index.get(artifact)) if matrix.index.has_baseline(artifact) else ""
                row = [labels[i], inherent, summary.conflicts_per_artifact.get(labels[i], 0)]
                row.extend(outcome.display_value for outcome in matrix.row(i))
                writer.writerow(row)

        logger.info("Exported matrix to %s", filename)
        print_success(f"Exported full matrix to {filename}")

    except IOError as e:
        logger.error("Failed to export CSV: %s", e)
        print_error(f"Failed to export CSV: {e}")


def build_linkage_graph(matrix: LinkageMatrix) -> "nx.DiGraph[Any]":
    """Build a directed graph of artifacts and their conflicting pairs.

    Node attributes:
        - label: Coordinate string
        - group, artifact, version: Coordinate parts
        - group_artifact: group:artifact key (for clustering in viewers)
        - inherent: Number of inherent problems (-1 when the baseline is unknown)
        - baseline_failed: Whether the self-check failed or was unavailable

    Edge attributes (row -> column, flagged pairs only):
        - weight: Number of newly introduced problems

    Args:
        matrix: Computed matrix

    Returns:
        NetworkX DiGraph keyed by coordinate string
    """
    G: Any = nx.DiGraph()
    for artifact in matrix.artifacts:
        failed = not matrix.index.has_baseline(artifact)
        G.add_node(
            str(artifact),
            label=str(artifact),
            group=artifact.group,
            artifact=artifact.artifact,
            version=artifact.version,
            group_artifact=group_artifact_key(artifact),
            inherent=-1 if failed else len(matrix.index.get(artifact)),
            baseline_failed=failed,
        )

    for (i, j), outcome in sorted(matrix.cells.items()):
        if outcome.is_flagged and outcome.count is not None:
            G.add_edge(str(matrix.artifacts[i]), str(matrix.artifacts[j]), weight=outcome.count)

    return G


def export_linkage_graph(filename: str, matrix: LinkageMatrix) -> None:
    """Export the conflict graph of a matrix.

    Supports: GraphML (.graphml), GEXF (.gexf), JSON node-link (.json)

    Args:
        filename: Output filename (extension determines format)
        matrix: Computed matrix
    """
    try:
        ext = os.path.splitext(filename)[1].lower()
        G = build_linkage_graph(matrix)

        if ext == ".graphml":
            nx.write_graphml(G, filename)
        elif ext == ".gexf":
            nx.write_gexf(G, filename)
        elif ext == ".json":
            data = json_graph.node_link_data(G)
            with open(filename, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        else:
            logger.warning("Unsupported graph format: %s (supported: %s). Defaulting to GraphML.", ext, ", ".join(SUPPORTED_GRAPH_FORMATS))
            filename = filename + ".graphml"
            nx.write_graphml(G, filename)

        logger.info("Exported linkage graph to %s", filename)
        print_success(f"Exported linkage graph to {filename}")

    except Exception as e:
        logger.error("Failed to export graph: %s", e)
        print_error(f"Failed to export graph: {e}")
