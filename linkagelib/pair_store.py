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
"""Pair result store: resolves an artifact pair to its precomputed linkage result.

Each pair result lives in its own JSON document whose path is derived from the
two coordinates and an optional namespace (typically the BOM being analyzed):

    <bom file-safe key>/<artifact1 file-safe key>___<artifact2 file-safe key>.json

Paths are deterministic, so results (and loads still in flight) are memoized
per store for the session.
Missing or unreadable documents raise ArtifactFetchError subclasses; callers
decide how to degrade (the matrix turns them into error cells).
"""

import os
import json
import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Union

import httpx

from .constants import DEFAULT_HTTP_TIMEOUT, DEFAULT_MAX_CONCURRENCY, PAIR_FILE_SUFFIX, PAIR_SEPARATOR, ArtifactFetchError, NetworkError, NotFoundError
from .coordinates import ArtifactCoordinate, file_safe_key
from .linkage_types import LinkageCheckFailure, LinkageCheckSuccess, PairResult, SymbolReference

logger = logging.getLogger(__name__)

SelfPairOutcome = Union[PairResult, ArtifactFetchError]


def pair_file_path(a: ArtifactCoordinate, b: ArtifactCoordinate, namespace: Optional[ArtifactCoordinate] = None) -> str:
    """Derive the relative path of the result document for a pair.

    Args:
        a: First artifact (row)
        b: Second artifact (column)
        namespace: Optional grouping coordinate (e.g., the BOM)

    Returns:
        Relative path using '/' separators
    """
    prefix = f"{file_safe_key(namespace)}/" if namespace is not None else ""
    return f"{prefix}{file_safe_key(a)}{PAIR_SEPARATOR}{file_safe_key(b)}{PAIR_FILE_SUFFIX}"


def _parse_references(path: str, raw: Any, member: str) -> Dict[str, List[SymbolReference]]:
    if not isinstance(raw, dict):
        raise NetworkError(f"Malformed result {path}: '{member}' must be an object", path)

    parsed: Dict[str, List[SymbolReference]] = {}
    for key, entries in raw.items():
        if not isinstance(entries, list):
            raise NetworkError(f"Malformed result {path}: '{member}.{key}' must be a list", path)
        references = []
        for entry in entries:
            if isinstance(entry, dict):
                references.append(SymbolReference(class_name=str(entry.get("className", "")), coordinates=str(entry.get("coordinates", ""))))
            else:
                # Older caches list bare class names
                references.append(SymbolReference(class_name=str(entry), coordinates=""))
        parsed[key] = references
    return parsed


def parse_pair_result(data: Any, path: str = "") -> PairResult:
    """Convert a decoded JSON document into a PairResult.

    Args:
        data: Decoded JSON value
        path: Source path, used in error messages

    Returns:
        LinkageCheckFailure if the document carries an error, else LinkageCheckSuccess

    Raises:
        NetworkError: If the document does not have the expected shape
    """
    if not isinstance(data, dict):
        raise NetworkError(f"Malformed result {path}: expected a JSON object", path)

    if "error" in data:
        return LinkageCheckFailure(error=str(data["error"]))

    if "symbolProblems" not in data and "references" not in data:
        raise NetworkError(f"Malformed result {path}: missing 'symbolProblems'", path)

    references = _parse_references(path, data.get("references", {}), "references")
    if "symbolProblems" in data:
        symbol_problems = _parse_references(path, data["symbolProblems"], "symbolProblems")
    else:
        # Self-pair documents written before symbolProblems existed
        symbol_problems = dict(references)

    class_path = data.get("classPathArtifacts", [])
    if not isinstance(class_path, list):
        raise NetworkError(f"Malformed result {path}: 'classPathArtifacts' must be a list", path)

    return LinkageCheckSuccess(symbol_problems=symbol_problems, references=references, class_path_artifacts=[str(c) for c in class_path])


class PairResultStore:
    """Base class for pair result stores.

    Subclasses implement _load_json(); this class provides path derivation,
    memoization, the concurrency limit and the self-pair batch.
    """

    def __init__(self, namespace: Optional[ArtifactCoordinate] = None, max_concurrency: int = DEFAULT_MAX_CONCURRENCY):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be positive, got {max_concurrency}")
        self.namespace = namespace
        self.max_concurrency = max_concurrency
        self.fetch_count = 0
        self._cache: Dict[str, PairResult] = {}
        self._in_flight: Dict[str, "asyncio.Future[PairResult]"] = {}
        self._semaphore: Optional[asyncio.Semaphore] = None

    def path_for(self, a: ArtifactCoordinate, b: ArtifactCoordinate) -> str:
        return pair_file_path(a, b, self.namespace)

    async def _load_json(self, path: str) -> Any:
        raise NotImplementedError

    async def _load_and_parse(self, path: str) -> PairResult:
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)

        async with self._semaphore:
            self.fetch_count += 1
            logger.debug("Fetching %s", path)
            data = await self._load_json(path)

        return parse_pair_result(data, path)

    async def fetch(self, a: ArtifactCoordinate, b: ArtifactCoordinate) -> PairResult:
        """Fetch the linkage result for a pair.

        Concurrent requests for the same path share one load. Failures are not
        cached, so a later request tries again.

        Raises:
            NotFoundError: If the result document does not exist
            NetworkError: If it is unreachable or malformed
        """
        path = self.path_for(a, b)
        cached = self._cache.get(path)
        if cached is not None:
            return cached

        task = self._in_flight.get(path)
        if task is None:
            task = asyncio.ensure_future(self._load_and_parse(path))
            self._in_flight[path] = task
        try:
            result = await asyncio.shield(task)
        finally:
            if task.done() and self._in_flight.get(path) is task:
                del self._in_flight[path]

        self._cache[path] = result
        return result

    async def fetch_self_pairs(self, artifacts: Iterable[ArtifactCoordinate]) -> Dict[ArtifactCoordinate, SelfPairOutcome]:
        """Fetch every self-pair result as one batch.

        A failed fetch is returned in place of that artifact's result and does not
        abort the batch. Unexpected exceptions propagate.

        Returns:
            Mapping of artifact -> PairResult or the ArtifactFetchError raised
        """
        unique = list(dict.fromkeys(artifacts))
        outcomes = await asyncio.gather(*(self.fetch(a, a) for a in unique), return_exceptions=True)

        results: Dict[ArtifactCoordinate, SelfPairOutcome] = {}
        for artifact, outcome in zip(unique, outcomes):
            if isinstance(outcome, ArtifactFetchError):
                logger.warning("Self-pair result unavailable for %s: %s", artifact, outcome)
                results[artifact] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results[artifact] = outcome
        return results

    async def aclose(self) -> None:
        """Release resources held by the store."""
        return None


class LocalPairResultStore(PairResultStore):
    """Reads pair results from a directory on disk."""

    def __init__(self, root_dir: str, namespace: Optional[ArtifactCoordinate] = None, max_concurrency: int = DEFAULT_MAX_CONCURRENCY):
        super().__init__(namespace, max_concurrency)
        self.root_dir = os.path.abspath(root_dir)

    def _read(self, path: str) -> Any:
        full_path = os.path.join(self.root_dir, *path.split("/"))
        try:
            with open(full_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise NotFoundError(f"Pair result not found: {path}", path) from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise NetworkError(f"Invalid JSON in {path}: {e}", path) from e
        except OSError as e:
            raise NetworkError(f"Failed to read {path}: {e}", path) from e

    async def _load_json(self, path: str) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read, path)


class HttpPairResultStore(PairResultStore):
    """Fetches pair results from a static HTTP server."""

    def __init__(
        self,
        base_url: str,
        namespace: Optional[ArtifactCoordinate] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        timeout: Optional[float] = DEFAULT_HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(namespace, max_concurrency)
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=httpx.Limits(max_connections=self.max_concurrency),
                transport=self._transport,
            )
        return self._client

    async def _load_json(self, path: str) -> Any:
        client = self._ensure_client()
        try:
            response = await client.get(path)
        except httpx.HTTPError as e:
            raise NetworkError(f"Failed to fetch {path}: {e}", path) from e

        if response.status_code == 404:
            raise NotFoundError(f"Pair result not found: {path}", path)
        if response.is_error:
            raise NetworkError(f"Failed to fetch {path}: HTTP {response.status_code}", path)

        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON in {path}: {e}", path) from e

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def create_store(
    data_dir: Optional[str] = None,
    base_url: Optional[str] = None,
    namespace: Optional[ArtifactCoordinate] = None,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    timeout: Optional[float] = DEFAULT_HTTP_TIMEOUT,
) -> PairResultStore:
    """Create the store for a data directory or a base URL (exactly one).

    Raises:
        ValueError: If neither or both locations are given
    """
    if (data_dir is None) == (base_url is None):
        raise ValueError("Specify exactly one of a data directory or a base URL")
    if data_dir is not None:
        if not os.path.isdir(data_dir):
            raise ValueError(f"Data directory does not exist: {data_dir}")
        return LocalPairResultStore(data_dir, namespace=namespace, max_concurrency=max_concurrency)
    if base_url is None:
        raise RuntimeError("No pair result location configured")
    return HttpPairResultStore(base_url, namespace=namespace, max_concurrency=max_concurrency, timeout=timeout)
