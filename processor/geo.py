"""Great-circle distance helpers."""
import math

# Mean earth radius in kilometers
EARTH_RADIUS_KM = 6371.0088


def distance_km(
    from_longitude: float,
    from_latitude: float,
    to_longitude: float,
    to_latitude: float
) -> float:
    """
    Compute the haversine distance between two points on a spherical earth.

    Args:
        from_longitude: Origin longitude in degrees
        from_latitude: Origin latitude in degrees
        to_longitude: Destination longitude in degrees
        to_latitude: Destination latitude in degrees

    Returns:
        Distance in kilometers (nan if any coordinate is nan)
    """
    d_lat = math.radians(to_latitude - from_latitude)
    d_lon = math.radians(to_longitude - from_longitude)
    lat1 = math.radians(from_latitude)
    lat2 = math.radians(to_latitude)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.sin(d_lon / 2) ** 2 * math.cos(lat1) * math.cos(lat2)
    )
    # Rounding can push antipodal points just past 1
    if a > 1:
        a = 1.0
    return 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a)) * EARTH_RADIUS_KM
