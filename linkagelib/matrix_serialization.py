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
"""Serialization/deserialization of computed linkage matrices to/from compressed JSON.

This module provides functions to save and load LinkageMatrix objects with:
- Deterministic JSON serialization (sorted keys, sorted collections)
- Schema versioning with strict validation
- Metadata tracking (timestamp, hostname, namespace)
- Gzip compression for storage efficiency

A loaded matrix can be re-rendered (terminal, HTML, exports) without fetching
any pair result again.
"""

import os
import json
import gzip
import socket
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from .color_utils import print_success
from .constants import EXIT_INVALID_ARGS, SCHEMA_VERSION, LinkageCheckError
from .coordinates import ArtifactCoordinate, parse
from .inherent_errors import InherentErrorIndex
from .linkage_types import CellOutcome, LinkageCheckFailure, LinkageCheckSuccess
from .matrix_builder import LinkageMatrix
from .pair_store import SelfPairOutcome

logger = logging.getLogger(__name__)


class SchemaVersionError(LinkageCheckError):
    """Saved results schema version is incompatible.

    No automatic migration is supported - the matrix must be recomputed.
    """

    def __init__(self, version: str):
        super().__init__(
            f"Saved matrix schema v{version} is not supported. Please recompute the matrix with the current linkageCheckMatrix.py (v{SCHEMA_VERSION})",
            exit_code=EXIT_INVALID_ARGS,
        )


def _get_hostname() -> str:
    """Get current hostname, or "unknown" if unavailable."""
    try:
        return socket.gethostname()
    except Exception as e:
        logger.debug("Failed to get hostname: %s", e)
        return "unknown"


def _serialize_cell(row: int, column: int, outcome: CellOutcome) -> Dict[str, Any]:
    return {
        "column": column,
        "count": outcome.count,
        "display_value": outcome.display_value,
        "is_error": outcome.is_error,
        "is_flagged": outcome.is_flagged,
        "is_not_applicable": outcome.is_not_applicable,
        "is_self_pair": outcome.is_self_pair,
        "message": outcome.message,
        "row": row,
    }


def _deserialize_cell(data: Dict[str, Any]) -> CellOutcome:
    return CellOutcome(
        display_value=data["display_value"],
        is_error=data["is_error"],
        is_flagged=data["is_flagged"],
        count=data["count"],
        is_self_pair=data["is_self_pair"],
        is_not_applicable=data["is_not_applicable"],
        message=data["message"],
    )


def matrix_to_dict(matrix: LinkageMatrix) -> Dict[str, Any]:
    """Convert a matrix into a JSON-serializable dict with deterministic ordering."""
    inherent: Dict[str, List[str]] = {}
    for artifact in matrix.artifacts:
        if artifact not in matrix.index.failures:
            inherent[str(artifact)] = sorted(matrix.index.get(artifact))

    return {
        "_description": "Linkage check matrix - DO NOT EDIT MANUALLY",
        "_schema_version": SCHEMA_VERSION,
        "artifacts": [str(a) for a in matrix.artifacts],
        "baseline_failures": {str(a): message for a, message in sorted(matrix.index.failures.items(), key=lambda x: str(x[0]))},
        "cells": [_serialize_cell(row, column, outcome) for (row, column), outcome in sorted(matrix.cells.items())],
        "inherent_errors": dict(sorted(inherent.items())),
        "metadata": {
            "hostname": _get_hostname(),
            "namespace": str(matrix.namespace) if matrix.namespace is not None else "",
            "timestamp": datetime.now().isoformat(),
        },
    }


def matrix_from_dict(data: Dict[str, Any]) -> LinkageMatrix:
    """Rebuild a matrix from matrix_to_dict() output.

    Raises:
        SchemaVersionError: If the schema version does not match
        ValueError: If the document is incomplete
    """
    file_version = data.get("_schema_version", "unknown")
    if file_version != SCHEMA_VERSION:
        raise SchemaVersionError(file_version)

    try:
        artifacts = [parse(text) for text in data["artifacts"]]
        outcomes: Dict[ArtifactCoordinate, SelfPairOutcome] = {}
        for text, keys in data["inherent_errors"].items():
            outcomes[parse(text)] = LinkageCheckSuccess(symbol_problems={key: [] for key in keys})
        for text, message in data["baseline_failures"].items():
            outcomes[parse(text)] = LinkageCheckFailure(error=message)
        cells = {(cell["row"], cell["column"]): _deserialize_cell(cell) for cell in data["cells"]}
        namespace_text = data["metadata"].get("namespace", "")
    except KeyError as e:
        raise ValueError(f"Saved matrix is missing field {e}") from e

    namespace: Optional[ArtifactCoordinate] = parse(namespace_text) if namespace_text else None
    return LinkageMatrix(artifacts=artifacts, cells=cells, index=InherentErrorIndex.from_self_pairs(outcomes), namespace=namespace)


def save_matrix_results(matrix: LinkageMatrix, filename: str) -> None:
    """Save a computed matrix to a gzip-compressed JSON file.

    Raises:
        IOError: If file cannot be written
    """
    logger.info("Saving matrix results to %s", filename)
    data = matrix_to_dict(matrix)
    try:
        with gzip.open(filename, "wt", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)

        size_kb = os.path.getsize(filename) / 1024
        logger.info("Saved matrix results: %.1f KB", size_kb)
        print_success(f"Saved matrix results to {filename} ({size_kb:.1f} KB)")

    except IOError as e:
        logger.error("Failed to save matrix results: %s", e)
        raise IOError(f"Failed to save matrix results to {filename}: {e}") from e


def load_matrix_results(filename: str) -> LinkageMatrix:
    """Load a matrix saved by save_matrix_results().

    Raises:
        SchemaVersionError: If schema version is incompatible
        ValueError: If the file is not valid JSON or is incomplete
        IOError: If file cannot be read
    """
    logger.info("Loading matrix results from %s", filename)
    try:
        with gzip.open(filename, "rt", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in matrix file: %s", e)
        raise ValueError(f"Invalid JSON in {filename}: {e}") from e
    except (IOError, OSError) as e:
        logger.error("Failed to load matrix results: %s", e)
        raise IOError(f"Failed to load matrix results from {filename}: {e}") from e

    matrix = matrix_from_dict(data)
    logger.debug("Saved matrix timestamp: %s", data["metadata"].get("timestamp", "unknown"))
    print_success(f"Loaded matrix results from {filename} ({matrix.size} artifacts)")
    return matrix
