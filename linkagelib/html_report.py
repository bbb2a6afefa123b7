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
"""HTML rendering of linkage check matrices and pair details (Jinja2)."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from jinja2 import Environment, StrictUndefined

from .color_utils import print_error, print_success
from .constants import CLASS_ERROR, CLASS_FLAGGED, CLASS_NOT_APPLICABLE, CLASS_SELF_PAIR
from .coordinates import ArtifactCoordinate, file_safe_key
from .linkage_types import CellOutcome, PairDetail
from .matrix_builder import LinkageMatrix
from .selection import Highlights

logger = logging.getLogger(__name__)

DEFAULT_DETAIL_PAGE = "cell.html"

_STYLE = """
body { font-family: sans-serif; }
table { border-collapse: collapse; }
th, td { border: 1px solid #ccc; padding: 2px 6px; text-align: center; }
td.flagged { background: #f8d0d0; }
td.error { background: #e0c0f0; }
td.not-applicable { color: #999; }
td.self-pair { color: #05a; }
.selected { outline: 2px solid #36c; }
.deemphasized { opacity: 0.4; }
"""

_MATRIX_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
<style>{{ style }}</style>
</head>
<body>
<h1>{{ title }}</h1>
<p>Cells count symbol problems introduced by combining the row and column artifacts.
Parenthesized diagonal values are the artifact's inherent problems.</p>
<table id="dependency-table">
<thead>
<tr><th colspan="2" rowspan="2"></th>
{% for span in spans %}<th colspan="{{ span.span }}">{{ span.key }}</th>{% endfor %}
</tr>
<tr>
{% for artifact in artifacts %}<th class="artifact-{{ artifact.token }}">{{ artifact.version }}</th>{% endfor %}
</tr>
</thead>
<tbody>
{% for row in rows %}
<tr>
{% if row.span %}<th rowspan="{{ row.span.span }}">{{ row.span.key }}</th>{% endif %}
<th class="artifact-{{ row.artifact.token }}">{{ row.artifact.version }}</th>
{% for cell in row.cells %}<td class="{{ cell.classes }}"{% if cell.title %} title="{{ cell.title }}"{% endif %}>{% if cell.href %}<a href="{{ cell.href }}">{{ cell.text }}</a>{% else %}{{ cell.text }}{% endif %}</td>{% endfor %}
</tr>
{% endfor %}
</tbody>
</table>
<p>Generated {{ generated }}</p>
</body>
</html>
"""

_DETAIL_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{{ detail.artifact1 }} x {{ detail.artifact2 }}</title>
<style>{{ style }}</style>
</head>
<body>
<h1 id="artifact-pair">{{ detail.artifact1 }} x {{ detail.artifact2 }}</h1>
{% if detail.error is not none %}
<p class="error">Linkage check unavailable: {{ detail.error }}</p>
{% else %}
<h2>New symbol problems ({{ detail.new_problems | length }})</h2>
<ul id="symbol-problems">
{% for problem in detail.new_problems %}
<li>{{ problem.key }}
{% if problem.references %}<ul>{% for reference in problem.references %}<li>{{ reference.class_name }}{% if reference.coordinates %} ({{ reference.coordinates }}){% endif %}</li>{% endfor %}</ul>{% endif %}
</li>
{% endfor %}
</ul>
{% endif %}
{% for section in inherent %}
<div id="{{ section.id }}">
<h2 class="artifact-name">{{ section.artifact }}</h2>
{% if section.baseline_error %}<p class="error">Baseline unavailable: {{ section.baseline_error }}</p>{% endif %}
<ul class="problem-list">
{% for problem in section.problems %}<li>{{ problem }}</li>{% endfor %}
</ul>
</div>
{% endfor %}
{% if detail.class_path_artifacts %}
<h2>Class path</h2>
<ol>{% for entry in detail.class_path_artifacts %}<li>{{ entry }}</li>{% endfor %}</ol>
{% endif %}
</body>
</html>
"""


def _build_environment() -> Environment:
    return Environment(undefined=StrictUndefined, autoescape=True, trim_blocks=True, lstrip_blocks=True)


_ENV = _build_environment()
_MATRIX = _ENV.from_string(_MATRIX_TEMPLATE)
_DETAIL = _ENV.from_string(_DETAIL_TEMPLATE)


def detail_href(
    artifact1: ArtifactCoordinate, artifact2: ArtifactCoordinate, namespace: Optional[ArtifactCoordinate] = None, page: str = DEFAULT_DETAIL_PAGE
) -> str:
    """Link from a matrix cell to the detail view of its pair."""
    params = {"artifact1": str(artifact1), "artifact2": str(artifact2)}
    if namespace is not None:
        params["bom"] = str(namespace)
    return f"{page}?{urlencode(params)}"


def cell_classes(outcome: CellOutcome, extra: Any = ()) -> List[str]:
    """CSS classes for a cell: outcome classes followed by selection classes."""
    classes = []
    if outcome.is_error:
        classes.append(CLASS_ERROR)
    if outcome.is_flagged:
        classes.append(CLASS_FLAGGED)
    if outcome.is_not_applicable:
        classes.append(CLASS_NOT_APPLICABLE)
    if outcome.is_self_pair:
        classes.append(CLASS_SELF_PAIR)
    classes.extend(sorted(extra))
    return classes


def render_matrix_html(
    matrix: LinkageMatrix, highlights: Optional[Highlights] = None, title: Optional[str] = None, detail_page: str = DEFAULT_DETAIL_PAGE
) -> str:
    """Render a matrix as a standalone HTML page.

    Column and row headers are two-level: one spanning cell per adjacent
    group:artifact run, then one cell per version.

    Args:
        matrix: Computed matrix
        highlights: Optional selection highlight classes per cell
        title: Page title (default derived from the namespace)
        detail_page: Page that renders a single pair

    Returns:
        HTML document
    """
    highlights = highlights or {}
    if title is None:
        title = f"Linkage Check Matrix for {matrix.namespace}" if matrix.namespace is not None else "Linkage Check Matrix"

    artifacts = [{"version": a.version, "token": file_safe_key(a)} for a in matrix.artifacts]
    span_starts = {span.start_index: span for span in matrix.header_spans}

    rows: List[Dict[str, Any]] = []
    for i, artifact in enumerate(matrix.artifacts):
        cells = []
        for j, other in enumerate(matrix.artifacts):
            outcome = matrix.cell(i, j)
            classes = cell_classes(outcome, highlights.get((i, j), ()))
            classes.extend([f"row-{file_safe_key(artifact)}", f"column-{file_safe_key(other)}"])
            cells.append(
                {
                    "text": outcome.display_value,
                    "classes": " ".join(classes),
                    "title": outcome.message,
                    "href": None if outcome.is_not_applicable else detail_href(artifact, other, matrix.namespace, detail_page),
                }
            )
        rows.append({"span": span_starts.get(i), "artifact": artifacts[i], "cells": cells})

    return _MATRIX.render(
        title=title,
        style=_STYLE,
        spans=matrix.header_spans,
        artifacts=artifacts,
        rows=rows,
        generated=datetime.now().isoformat(timespec="seconds"),
    )


def render_pair_detail_html(detail: PairDetail) -> str:
    """Render the detail view of one pair as a standalone HTML page."""
    inherent = [
        {
            "id": "artifact1",
            "artifact": str(detail.artifact1),
            "problems": detail.inherent_problems1,
            "baseline_error": detail.baseline_errors.get(str(detail.artifact1), ""),
        },
        {
            "id": "artifact2",
            "artifact": str(detail.artifact2),
            "problems": detail.inherent_problems2,
            "baseline_error": detail.baseline_errors.get(str(detail.artifact2), ""),
        },
    ]
    return _DETAIL.render(detail=detail, inherent=inherent, style=_STYLE)


def write_html(filename: str, html: str) -> bool:
    """Write an HTML document, reporting success or failure.

    Returns:
        True if the file was written
    """
    try:
        with open(filename, "w", encoding="utf-8") as f:
            f.write(html)
    except IOError as e:
        logger.error("Failed to write HTML report: %s", e)
        print_error(f"Failed to write HTML report: {e}")
        return False

    logger.info("Wrote HTML report to %s", filename)
    print_success(f"Wrote HTML report to {filename}")
    return True
