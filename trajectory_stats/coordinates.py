"""
Geometry primitives for trajectory analysis.

Great-circle distance, forward bearing and angle normalization. Scalar
functions work on plain floats; the vectorized variants accept numpy arrays of
consecutive points and return one value per consecutive pair.
"""

import numpy as np


EARTH_RADIUS_KM = 6371.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate great-circle distance between two points using Haversine formula.

    Args:
        lat1, lon1: First point (degrees)
        lat2, lon2: Second point (degrees)

    Returns:
        Distance in kilometers
    """
    lat1_rad = np.radians(lat1)
    lat2_rad = np.radians(lat2)
    dlat = np.radians(lat2 - lat1)
    dlon = np.radians(lon2 - lon1)

    a = np.sin(dlat / 2)**2 + np.cos(lat1_rad) * np.cos(lat2_rad) * np.sin(dlon / 2)**2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    return float(EARTH_RADIUS_KM * c)


def compute_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Compute initial bearing from point 1 to point 2.

    Args:
        lat1, lon1: First point (degrees)
        lat2, lon2: Second point (degrees)

    Returns:
        Bearing in degrees (0-360, where 0 is North)
    """
    lat1_rad = np.radians(lat1)
    lat2_rad = np.radians(lat2)
    dlon_rad = np.radians(lon2 - lon1)

    x = np.sin(dlon_rad) * np.cos(lat2_rad)
    y = np.cos(lat1_rad) * np.sin(lat2_rad) - np.sin(lat1_rad) * np.cos(lat2_rad) * np.cos(dlon_rad)

    bearing = np.degrees(np.arctan2(x, y))
    return float((bearing + 360) % 360)


def segment_distances(lat: np.ndarray, lon: np.ndarray) -> np.ndarray:
    """
    Haversine distance (km) for every consecutive pair of points.

    Returns an array of length len(lat) - 1.
    """
    lat = np.asarray(lat, dtype=float)
    lon = np.asarray(lon, dtype=float)
    if len(lat) < 2:
        return np.zeros(0)

    lat1_rad = np.radians(lat[:-1])
    lat2_rad = np.radians(lat[1:])
    dlat = np.radians(lat[1:] - lat[:-1])
    dlon = np.radians(lon[1:] - lon[:-1])

    a = np.sin(dlat / 2)**2 + np.cos(lat1_rad) * np.cos(lat2_rad) * np.sin(dlon / 2)**2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def segment_bearings(lat: np.ndarray, lon: np.ndarray) -> np.ndarray:
    """Forward bearing (degrees, 0-360) for every consecutive pair of points."""
    lat = np.asarray(lat, dtype=float)
    lon = np.asarray(lon, dtype=float)
    if len(lat) < 2:
        return np.zeros(0)

    lat1_rad = np.radians(lat[:-1])
    lat2_rad = np.radians(lat[1:])
    dlon_rad = np.radians(lon[1:] - lon[:-1])

    x = np.sin(dlon_rad) * np.cos(lat2_rad)
    y = np.cos(lat1_rad) * np.sin(lat2_rad) - np.sin(lat1_rad) * np.cos(lat2_rad) * np.cos(dlon_rad)

    return (np.degrees(np.arctan2(x, y)) + 360) % 360


def normalize_angle(angle: float) -> float:
    """Normalize angle to (-180, 180] degrees."""
    while angle > 180:
        angle -= 360
    while angle <= -180:
        angle += 360
    return angle
