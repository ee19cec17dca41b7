"""Spatial queries consumed by the scoring engine.

The core only depends on the :class:`SpatialIndex` protocol. The default
implementation answers it straight from ``litter_reports``; a deployment with
PostGIS can plug in an index-backed implementation instead.
"""

from __future__ import annotations

import math
import uuid
from datetime import datetime
from typing import NamedTuple, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from litterpick.models.report import LitterReport

EARTH_RADIUS_KM = 6371.0
# Kilometres per degree of latitude.
KM_PER_DEGREE = 111.32


class GeoPoint(NamedTuple):
    """WGS84 coordinate pair."""

    latitude: float
    longitude: float


class SpatialIndex(Protocol):
    """Contract for the external spatial/time query service."""

    def nearby_cleared_within(
        self,
        point: GeoPoint,
        radius_km: float,
        since: datetime,
    ) -> set[uuid.UUID]:
        """Return ids of reports cleared after ``since`` within ``radius_km`` of ``point``."""
        ...


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Calculate the great-circle distance between two coordinates in km."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    delta_lat = math.radians(b.latitude - a.latitude)
    delta_lon = math.radians(b.longitude - a.longitude)

    h = (math.sin(delta_lat / 2) ** 2 +
         math.cos(lat1) * math.cos(lat2) *
         math.sin(delta_lon / 2) ** 2)
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


class HaversineSpatialIndex:
    """Answer spatial queries with a bounding-box prefilter and an exact distance check."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def nearby_cleared_within(
        self,
        point: GeoPoint,
        radius_km: float,
        since: datetime,
    ) -> set[uuid.UUID]:
        lat_delta = radius_km / KM_PER_DEGREE
        # Longitude degrees shrink towards the poles; clamp to avoid division blow-up.
        cos_lat = max(math.cos(math.radians(point.latitude)), 1e-6)
        lng_delta = min(180.0, radius_km / (KM_PER_DEGREE * cos_lat))

        rows = self.session.execute(
            select(LitterReport.id, LitterReport.latitude, LitterReport.longitude)
            .where(
                LitterReport.cleared_at.is_not(None),
                LitterReport.cleared_at > since,
                LitterReport.latitude.between(point.latitude - lat_delta, point.latitude + lat_delta),
                LitterReport.longitude.between(point.longitude - lng_delta, point.longitude + lng_delta),
            )
        ).all()

        return {
            row.id
            for row in rows
            if haversine_km(point, GeoPoint(row.latitude, row.longitude)) <= radius_km
        }
