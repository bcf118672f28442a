# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# ...
from __future__ import annotations

import csv
import json
from typing import Iterable, Any, List
from pathlib import Path

from ..domain.index import ContentIndex
from .duplicate_service import DuplicateService

SUPPORTED_FORMATS = ("json", "ndjson", "csv")


class ReportService:
    """
    Generates human- and machine-readable duplicate reports (JSON/NDJSON/CSV).

    Notes:
      - JSON (default): one JSON array of clusters; each cluster is a list of file dicts.
      - NDJSON: one cluster (list of file dicts) per line, as a JSON array.
      - CSV: flattened rows with a synthetic cluster_id; stable column order.
    """

    def __init__(self, index: ContentIndex) -> None:
        self._index = index

    def _clusters(self) -> Iterable[list[dict[str, Any]]]:
        return DuplicateService(self._index).clusters()

    def write_duplicates(self, out: Path, fmt: str = "json") -> Path:
        """
        Write an exact-duplicate report to `out` in the specified format.

        Returns:
            The path written.

        Raises:
            ValueError: if an unsupported format is requested.
        """
        fmt = (fmt or "json").lower()
        if fmt not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported format: {fmt}")

        clusters: List[List[dict[str, Any]]] = [list(c) for c in self._clusters()]
        out.parent.mkdir(parents=True, exist_ok=True)

        if fmt == "json":
            out.write_text(
                json.dumps(clusters, ensure_ascii=False, indent=2), encoding="utf-8"
            )
            return out

        if fmt == "ndjson":
            lines = (json.dumps(cluster, ensure_ascii=False) for cluster in clusters)
            text = "\n".join(lines)
            out.write_text(text + ("\n" if text else ""), encoding="utf-8")
            return out

        # csv; header is written even when there are no clusters
        fieldnames = ["cluster_id", "key", "path", "size", "mode", "mod_time"]
        with open(out, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for cluster_id, cluster in enumerate(clusters, start=1):
                for rec in cluster:
                    writer.writerow({"cluster_id": cluster_id, **rec})
        return out
