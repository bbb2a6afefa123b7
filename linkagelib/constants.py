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
"""Shared constants for linkageCheck tools.

This module provides centralized constants used across the matrix and detail
tools to ensure consistency and make it easy to adjust defaults.
"""

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_SUCCESS = 0
EXIT_INVALID_ARGS = 1
EXIT_RUNTIME_ERROR = 2
EXIT_KEYBOARD_INTERRUPT = 130

# =============================================================================
# Backing Data Layout
# =============================================================================

PAIR_SEPARATOR = "___"  # Joins the two artifact keys in a pair file name
PAIR_FILE_SUFFIX = ".json"  # Every pair result is a JSON document
COORDINATE_SEPARATOR = ":"  # group:artifact:version
ARTIFACT_LIST_SEPARATOR = ","  # --artifacts g:a:1,g:b:2
FILE_SAFE_REPLACEMENT = "_"  # Replaces ':' and '.' in file-safe keys

# =============================================================================
# Fetch Defaults
# =============================================================================

DEFAULT_MAX_CONCURRENCY = 16  # Concurrent pair fetches in flight
DEFAULT_HTTP_TIMEOUT = None  # None = wait forever (no timeout)

# =============================================================================
# Matrix Display Symbols
# =============================================================================

NOT_APPLICABLE_MARKER = "N/A"  # Two versions of the same artifact
# Check failed or pair file unavailable. Older pages rendered a failed self-pair
# as "error1"; every failed cell here uses this one marker.
ERROR_MARKER = "error"
PENDING_CELL = ""  # Cell whose fetch has not resolved yet
SELF_PAIR_FORMAT = "({count})"  # Baseline count on the diagonal

# Cell classes consumed by the renderers
CLASS_ERROR = "error"
CLASS_FLAGGED = "flagged"
CLASS_NOT_APPLICABLE = "not-applicable"
CLASS_SELF_PAIR = "self-pair"
CLASS_SELECTED = "selected"
CLASS_DEEMPHASIZED = "deemphasized"

MAX_LABEL_WIDTH = 40  # Truncate long coordinates in terminal headers

# =============================================================================
# Serialization
# =============================================================================

SCHEMA_VERSION = "1.0"  # Saved matrix results format
SUPPORTED_GRAPH_FORMATS = [".graphml", ".gexf", ".json"]

# =============================================================================
# Exception Classes
# =============================================================================


class LinkageCheckError(Exception):
    """Base exception for all linkageCheck errors.

    All linkageCheck exceptions carry an exit_code attribute that indicates
    what exit code the program should use when this error is caught at the
    main entry point.
    """

    def __init__(self, message: str, exit_code: int = EXIT_RUNTIME_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


# Validation errors (EXIT_INVALID_ARGS)
class ValidationError(LinkageCheckError):
    """Raised when input validation fails (arguments, coordinates, etc)."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_INVALID_ARGS)


class FormatError(ValidationError):
    """Raised when an artifact coordinate string is malformed."""


class ArgumentError(ValidationError):
    """Raised when command-line arguments are invalid."""


# Fetch errors (EXIT_RUNTIME_ERROR), recovered per cell by the matrix
class ArtifactFetchError(LinkageCheckError):
    """Raised when a pair result cannot be obtained from the backing store."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class NotFoundError(ArtifactFetchError):
    """Raised when the pair result file does not exist."""


class NetworkError(ArtifactFetchError):
    """Raised when the pair result is unreachable or unreadable."""
