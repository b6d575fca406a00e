# musicglobe/globe/export.py
"""Read play records from disk and write placed nodes out for a renderer."""

import json
import logging
from typing import Any, Dict, List, Sequence

from musicglobe.globe.models import DEFAULT_RADIUS, PlacedNode, PlayRecord, normalize_records

logger = logging.getLogger(__name__)


def nodes_document(nodes: Sequence[PlacedNode]) -> Dict[str, Any]:
    radius = nodes[0].radius if nodes else DEFAULT_RADIUS
    return {
        "radius": radius,
        "count": len(nodes),
        "nodes": [n.to_dict() for n in nodes],
    }


def nodes_to_json(nodes: Sequence[PlacedNode], indent: int = 2) -> str:
    return json.dumps(nodes_document(nodes), indent=indent)


def write_nodes(nodes: Sequence[PlacedNode], path: str) -> None:
    with open(path, "w", encoding="utf8") as fh:
        fh.write(nodes_to_json(nodes))
    logger.info("wrote %d nodes to %s", len(nodes), path)


def load_records(path: str) -> List[PlayRecord]:
    """
    Load records from a JSON file. Accepts either:
      - a list of cached PlayRecord dicts (PlayRecord.to_dict output)
      - a list of raw Spotify items (recently-played or playlist shape)
      - a Spotify page object with an "items" list
    """
    with open(path, "r", encoding="utf8") as fh:
        data = json.load(fh)

    if isinstance(data, dict):
        # a Spotify page; anything else shaped like an object is not a record list
        if "items" not in data:
            raise ValueError(f"{path}: expected a JSON list of records")
        items = data["items"]
    else:
        items = data
    if not isinstance(items, list):
        raise ValueError(f"{path}: expected a JSON list of records")
    if not items:
        return []

    if not all(isinstance(it, dict) for it in items):
        raise ValueError(f"{path}: expected a JSON list of objects")
    first = items[0]
    if "track_id" in first:
        return [PlayRecord.from_dict(d) for d in items]
    if "added_at" in first:
        return normalize_records(items, kind="playlist")
    return normalize_records(items, kind="history")
