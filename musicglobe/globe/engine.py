# musicglobe/globe/engine.py
"""
Placement engine: pins PlayRecords onto the globe.

Design notes:
- Input order is kept as-is (callers pass records in relevance order); no sorting, no dedup.
- Positions come from a Fibonacci sphere: heights step evenly from the north pole
  to the south pole while the azimuth advances by the golden angle, which spreads
  any number of points evenly without banding.
- Placement ignores what the records are (artist, time, genre). Only the count
  and index matter, so output is fully deterministic.
"""

import logging
import math
from typing import Iterable, List, Tuple

from musicglobe.globe.models import DEFAULT_RADIUS, PlacedNode, PlayRecord

logger = logging.getLogger(__name__)

GOLDEN_RATIO = (1 + math.sqrt(5)) / 2

# where a lone record goes: equator, prime meridian
SINGLE_NODE_LATITUDE = 0.0
SINGLE_NODE_LONGITUDE = 0.0


def fibonacci_point(i: int, n: int) -> Tuple[float, float]:
    """
    (latitude, longitude) in degrees of point i out of n on a Fibonacci sphere.
    Index 0 is the north pole and index n-1 the south pole.
    """
    if n <= 1:
        return SINGLE_NODE_LATITUDE, SINGLE_NODE_LONGITUDE

    y = 1 - (i / (n - 1)) * 2
    # float noise can push 1 - y*y a hair below zero at the poles
    r = math.sqrt(max(0.0, 1 - y * y))
    theta = 2 * math.pi * i / GOLDEN_RATIO

    x = math.cos(theta) * r
    z = math.sin(theta) * r

    latitude = math.degrees(math.asin(max(-1.0, min(1.0, y))))
    longitude = math.degrees(math.atan2(z, x))
    return latitude, longitude


class PlacementEngine:
    def __init__(self, *, radius: float = DEFAULT_RADIUS):
        """
        radius: distance of every node from the globe centre
        """
        self.radius = float(radius)

    # -----------------------
    # public entry
    # -----------------------
    def place(self, records: Iterable[PlayRecord]) -> List[PlacedNode]:
        """Return one PlacedNode per record, in the same order."""
        records = list(records)
        n = len(records)

        nodes = []
        for i, rec in enumerate(records):
            lat, lon = fibonacci_point(i, n)
            nodes.append(PlacedNode(record=rec, latitude=lat, longitude=lon, radius=self.radius))

        logger.debug("placed %d nodes at radius %.2f", len(nodes), self.radius)
        return nodes


def place_nodes(records: Iterable[PlayRecord], radius: float = DEFAULT_RADIUS) -> List[PlacedNode]:
    return PlacementEngine(radius=radius).place(records)
