"""Redis cache for Overpass amenity responses."""

import hashlib
import json
import logging
from typing import Any, Dict, Optional

import redis
from parcelgeo.core.config import get_settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "amenities"


class AmenityCache:
    """Redis cache for amenity query results, keyed by search origin and radii."""

    def __init__(self, redis_client: Optional[redis.Redis] = None, ttl_seconds: Optional[int] = None):
        """
        Initialize the amenity cache.

        Args:
            redis_client: Optional Redis client (creates new if not provided)
            ttl_seconds: Optional TTL (defaults to config value)
        """
        settings = get_settings()
        self.redis_client = redis_client
        self.ttl_seconds = ttl_seconds or settings.amenity_cache_ttl_seconds
        self._cache_enabled = settings.amenity_cache_enabled

        if self._cache_enabled and self.redis_client is None:
            try:
                self.redis_client = redis.from_url(
                    settings.redis_url,
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_timeout=5,
                )
                self.redis_client.ping()
                logger.info("Amenity cache initialized successfully")
            except Exception as e:
                logger.warning(f"Amenity cache initialization failed: {str(e)}")
                logger.warning("Continuing without cache (graceful degradation)")
                self._cache_enabled = False
                self.redis_client = None

    def _generate_cache_key(self, lat: float, lng: float, radius_m: int, transit_radius_m: int) -> str:
        # ~1 m precision; listings re-submitted with the same polygon hit the same key
        key_string = f"{lat:.5f}:{lng:.5f}:{radius_m}:{transit_radius_m}"
        key_hash = hashlib.md5(key_string.encode()).hexdigest()
        return f"{KEY_PREFIX}:{key_hash}"

    def get(self, lat: float, lng: float, radius_m: int, transit_radius_m: int) -> Optional[Dict[str, Any]]:
        """
        Get a cached Overpass response.

        Returns:
            Cached response or None if not found or cache unavailable
        """
        if not self.is_enabled():
            return None

        try:
            cache_key = self._generate_cache_key(lat, lng, radius_m, transit_radius_m)
            cached_data = self.redis_client.get(cache_key)

            if cached_data:
                logger.debug(f"Cache hit for key: {cache_key}")
                return json.loads(cached_data)
            logger.debug(f"Cache miss for key: {cache_key}")
            return None

        except Exception as e:
            logger.error(f"Error getting cached amenities: {str(e)}")
            return None

    def set(self, data: Dict[str, Any], lat: float, lng: float, radius_m: int, transit_radius_m: int):
        """Cache an Overpass response."""
        if not self.is_enabled():
            return

        try:
            cache_key = self._generate_cache_key(lat, lng, radius_m, transit_radius_m)
            self.redis_client.setex(cache_key, self.ttl_seconds, json.dumps(data, default=str))
            logger.debug(f"Cached amenities with key: {cache_key} (TTL: {self.ttl_seconds}s)")

        except Exception as e:
            logger.error(f"Error caching amenities: {str(e)}")

    def is_enabled(self) -> bool:
        """
        Check if cache is enabled and available.

        Returns:
            True if cache is enabled and available
        """
        return self._cache_enabled and self.redis_client is not None


# Singleton instance
_cache: Optional[AmenityCache] = None


def get_amenity_cache() -> AmenityCache:
    """
    Get the singleton amenity cache instance.

    Returns:
        AmenityCache instance
    """
    global _cache
    if _cache is None:
        _cache = AmenityCache()
    return _cache
