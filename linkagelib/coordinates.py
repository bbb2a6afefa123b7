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
"""Artifact coordinates: parsing, grouping and file-safe keys.

A coordinate is a ``group:artifact:version`` triple. Two coordinates that share
group and artifact but differ in version are never compared in the matrix since
both versions cannot coexist on one classpath.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from .constants import ARTIFACT_LIST_SEPARATOR, COORDINATE_SEPARATOR, FILE_SAFE_REPLACEMENT, FormatError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactCoordinate:
    """Maven-style artifact coordinate.

    Attributes:
        group: Group ID (e.g., "com.google.guava")
        artifact: Artifact ID (e.g., "guava")
        version: Version string (e.g., "28.0-jre")
    """

    group: str
    artifact: str
    version: str

    def __str__(self) -> str:
        return COORDINATE_SEPARATOR.join((self.group, self.artifact, self.version))

    @property
    def group_artifact_key(self) -> str:
        return group_artifact_key(self)

    @property
    def file_safe_key(self) -> str:
        return file_safe_key(self)


def parse(text: str) -> ArtifactCoordinate:
    """Parse a ``group:artifact:version`` string.

    Args:
        text: Coordinate string

    Returns:
        Parsed ArtifactCoordinate

    Raises:
        FormatError: If the string does not have exactly three non-empty segments
    """
    segments = text.strip().split(COORDINATE_SEPARATOR)
    if len(segments) != 3 or not all(segments):
        raise FormatError(f"Invalid artifact coordinate '{text}': expected group:artifact:version")
    group, artifact, version = segments
    return ArtifactCoordinate(group=group, artifact=artifact, version=version)


def parse_artifact_list(text: str) -> Tuple[List[ArtifactCoordinate], List[FormatError]]:
    """Parse a comma-separated coordinate list, preserving input order.

    Malformed entries do not abort parsing: they are returned as errors so the
    caller can drop only the affected artifact's row and column.

    Args:
        text: Comma-separated coordinates (e.g., "g:a:1,g:a:2,g:b:1")

    Returns:
        Tuple of (coordinates, errors)
    """
    coordinates: List[ArtifactCoordinate] = []
    errors: List[FormatError] = []
    for entry in text.split(ARTIFACT_LIST_SEPARATOR):
        if not entry.strip():
            continue
        try:
            coordinates.append(parse(entry))
        except FormatError as e:
            logger.debug("Skipping malformed coordinate: %s", entry)
            errors.append(e)
    return coordinates, errors


def same_artifact_different_version(a: ArtifactCoordinate, b: ArtifactCoordinate) -> bool:
    """Check whether two coordinates are different versions of one artifact."""
    return a.version != b.version and a.group == b.group and a.artifact == b.artifact


def group_artifact_key(coordinate: ArtifactCoordinate) -> str:
    """Return ``group:artifact``, the key used to merge matrix headers."""
    return f"{coordinate.group}{COORDINATE_SEPARATOR}{coordinate.artifact}"


def file_safe_key(coordinate: ArtifactCoordinate) -> str:
    """Return the coordinate with ':' and '.' replaced by '_'.

    The result is safe as a file name component and as a CSS class token.
    """
    return str(coordinate).replace(COORDINATE_SEPARATOR, FILE_SAFE_REPLACEMENT).replace(".", FILE_SAFE_REPLACEMENT)
