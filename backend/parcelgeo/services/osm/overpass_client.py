"""Overpass API client for fetching amenities around a point."""

import logging
import threading
import time
from typing import Any, Dict, List, Optional
import requests
from requests.adapters import HTTPAdapter
from urllib3.exceptions import ConnectTimeoutError, ReadTimeoutError
from urllib3.util.retry import Retry

from parcelgeo.core.config import get_settings

logger = logging.getLogger(__name__)


def _is_timeout(exc: requests.exceptions.RequestException) -> bool:
    # Timeouts that exhaust the retry adapter surface as ConnectionError(MaxRetryError)
    if isinstance(exc, requests.exceptions.Timeout):
        return True
    reason = getattr(exc.args[0], "reason", None) if exc.args else None
    return isinstance(reason, (ConnectTimeoutError, ReadTimeoutError))


class AmenitySourceError(RuntimeError):
    """The amenity source could not be queried. Callers may retry later."""

    retryable = False


class AmenitySourceTimeout(AmenitySourceError):
    """Every endpoint timed out; safe to retry on the next schedule."""

    retryable = True


class OverpassClient:
    """Client for interacting with Overpass API."""

    def __init__(
        self,
        api_url: str = "https://overpass-api.de/api/interpreter",
        alternative_urls: Optional[List[str]] = None,
        timeout: int = 20,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        min_request_interval: float = 1.0,
        user_agent: str = "ParcelGeo-Proximity/1.0",
    ):
        """
        Initialize Overpass API client.

        Args:
            api_url: Primary Overpass API endpoint URL
            alternative_urls: Endpoints tried in order when the primary fails
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts per endpoint
            retry_delay: Backoff factor between retries in seconds
            min_request_interval: Minimum delay between two requests in seconds
            user_agent: User-Agent header sent with every request
        """
        self.api_url = api_url
        self.alternative_urls = alternative_urls or []
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.min_request_interval = min_request_interval
        self.user_agent = user_agent

        # Overpass is shared and rate limited: one request at a time per client
        self._lock = threading.Lock()
        self._last_request_time = 0.0

        # Configure session with retry strategy
        self.session = requests.Session()
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=retry_delay,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "POST"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @classmethod
    def from_settings(cls, settings) -> "OverpassClient":
        return cls(
            api_url=settings.overpass_api_url,
            alternative_urls=settings.overpass_api_alternatives,
            timeout=settings.overpass_timeout_seconds,
            max_retries=settings.overpass_max_retries,
            retry_delay=settings.overpass_retry_delay,
            min_request_interval=settings.overpass_min_request_interval,
            user_agent=settings.overpass_user_agent,
        )

    def build_amenity_query(
        self,
        lat: float,
        lng: float,
        radius_m: int,
        transit_radius_m: int,
        road_tags: List[str],
    ) -> str:
        """
        Build Overpass QL query for amenities around a point.

        The output is not capped; Overpass orders elements by id, not distance.

        Args:
            lat: Latitude of the search origin
            lng: Longitude of the search origin
            radius_m: Search radius for roads, hospitals, schools and markets
            transit_radius_m: Search radius for public transport stops
            road_tags: Highway tag values counted as roads

        Returns:
            Overpass QL query string
        """
        around = f"(around:{radius_m},{lat},{lng})"
        transit_around = f"(around:{transit_radius_m},{lat},{lng})"
        highway_filter = "|".join(road_tags)

        query = f"""
[out:json][timeout:{self.timeout}];
(
  way["highway"~"^({highway_filter})$"]{around};
  nwr["amenity"="hospital"]{around};
  nwr["amenity"~"^(school|university)$"]{around};
  nwr["amenity"="marketplace"]{around};
  nwr["shop"="supermarket"]{around};
  node["public_transport"]{transit_around};
);
out center;
"""

        return query

    def _rate_limit(self):
        """Ensure we don't exceed rate limits"""
        elapsed = time.monotonic() - self._last_request_time
        if elapsed < self.min_request_interval:
            time.sleep(self.min_request_interval - elapsed)
        self._last_request_time = time.monotonic()

    def fetch_json(self, query: str) -> Dict[str, Any]:
        """
        Run a query, trying alternative endpoints if the primary fails.

        Args:
            query: Overpass QL query with [out:json]

        Returns:
            Parsed JSON response

        Raises:
            AmenitySourceTimeout: If every endpoint timed out
            AmenitySourceError: If every endpoint failed and at least one did not time out
        """
        urls_to_try = [self.api_url] + [u for u in self.alternative_urls if u != self.api_url]

        errors = []
        all_timeouts = True
        with self._lock:
            for api_url in urls_to_try:
                self._rate_limit()
                try:
                    logger.info(f"Trying Overpass API: {api_url}")
                    response = self.session.post(
                        api_url,
                        data={"data": query},
                        timeout=self.timeout,
                        headers={"User-Agent": self.user_agent},
                    )
                    response.raise_for_status()
                    data = response.json()

                    logger.info(
                        f"Received Overpass data from {api_url}, elements: {len(data.get('elements', []))}"
                    )
                    return data

                except requests.exceptions.RequestException as e:
                    if _is_timeout(e):
                        logger.warning(f"Timeout from {api_url}: {str(e)}")
                    else:
                        logger.warning(f"Failed to fetch from {api_url}: {str(e)}")
                        all_timeouts = False
                    errors.append(str(e))
                    continue
                except ValueError as e:
                    # Overpass answers some overload errors with an HTML page
                    logger.warning(f"Failed to fetch from {api_url}: {str(e)}")
                    errors.append(str(e))
                    all_timeouts = False
                    continue

        last_error = errors[-1] if errors else "no endpoints configured"
        logger.error(f"All Overpass API endpoints failed. Last error: {last_error}")
        if all_timeouts and errors:
            raise AmenitySourceTimeout(f"Overpass API timed out on all endpoints: {last_error}")
        raise AmenitySourceError(f"Failed to fetch amenity data from all endpoints. Last error: {last_error}")

    def check_api_status(self) -> Dict[str, Any]:
        """
        Check Overpass API status.

        Returns:
            Dictionary with API status information
        """
        try:
            test_query = "[out:json][timeout:5];node(1);out;"
            response = self.session.post(
                self.api_url,
                data={"data": test_query},
                timeout=10,
                headers={"User-Agent": self.user_agent},
            )
            response.raise_for_status()
            return {
                "status": "available",
                "url": self.api_url,
                "response_time_ms": response.elapsed.total_seconds() * 1000,
            }
        except Exception as e:
            return {
                "status": "unavailable",
                "url": self.api_url,
                "error": str(e),
            }


# Shared instance: request lock and spacing are per client
_client: Optional[OverpassClient] = None
_client_lock = threading.Lock()


def get_overpass_client() -> OverpassClient:
    """
    Get the shared Overpass client instance.

    Returns:
        OverpassClient built from the application settings
    """
    global _client
    with _client_lock:
        if _client is None:
            _client = OverpassClient.from_settings(get_settings())
    return _client
