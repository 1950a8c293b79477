"""
Weather widget and the location lookup used to configure it.
"""

import gzip
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
import zlib
from dataclasses import dataclass
from typing import List

from ..config.settings import AppSettings
from .base import BaseWidget, WidgetModule

logger = logging.getLogger(__name__)

DEFAULT_WEATHER_FORMAT = "{i}{n} {nt}°~{dt}° ({t}°)💧{h}%"

LOCATION_LOOKUP_URL = "https://geoapi.qweather.com/v2/city/lookup"


class WeatherWidget(BaseWidget):
    """
    Weather summary for a location.

    Configuration:
        location: Location id from fetch_locations (default: "")
        format: Display template (default: DEFAULT_WEATHER_FORMAT)

    Template placeholders are filled by the overlay renderer:
    {i} icon, {n} condition now, {t} temperature now, {h} humidity,
    {nt} low today, {dt} high today.

    Example:
        location: "101010100"
        format: "{i} {t}°"
    """

    module = WidgetModule.WEATHER
    defaults = {"location": "", "format": DEFAULT_WEATHER_FORMAT}
    text_options = ("location", "format")

    def render_preview(self, settings: AppSettings) -> str:
        return "Weather Preview"


@dataclass
class Location:
    """One match from the location lookup."""

    id: str
    name: str
    country: str
    region1: str
    region2: str
    lat: str
    lon: str


def _language(date_locale: str) -> str:
    """Lookup API language code for a settings locale ("zh_CN" -> "zh")."""
    return (date_locale or "en_US").split("_")[0].lower()


def fetch_locations(
    name: str, api_key: str, date_locale: str = "en_US", timeout: float = 5
) -> List[Location]:
    """
    Search locations by name.

    Args:
        name: Free-text location name
        api_key: Weather API key from the app settings
        date_locale: Settings locale, selects the response language
        timeout: Request timeout in seconds

    Returns:
        Matching locations; empty on any lookup failure
    """
    if not name:
        return []

    query = urllib.parse.urlencode(
        {"location": name, "key": api_key, "lang": _language(date_locale)}
    )
    url = f"{LOCATION_LOOKUP_URL}?{query}"

    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            body = response.read()
            if response.headers.get("Content-Encoding") == "gzip":
                body = gzip.decompress(body)
            data = json.loads(body.decode())

        if data.get("code") != "200":
            logger.warning(f"Location lookup for {name!r} returned code {data.get('code')!r}")
            return []

        return [
            Location(
                id=item["id"],
                name=item["name"],
                country=item["country"],
                region1=item["adm1"],
                region2=item["adm2"],
                lat=item["lat"],
                lon=item["lon"],
            )
            for item in data.get("location", [])
        ]

    except urllib.error.HTTPError as e:
        logger.error(f"Location lookup HTTP error: {e.code} - {e.reason}")
        if e.code in (401, 403):
            logger.error("Invalid weather API key")
        return []

    except urllib.error.URLError as e:
        logger.error(f"Location lookup connection error: {e}")
        return []

    except (UnicodeDecodeError, EOFError, zlib.error, OSError) as e:
        # Read timeouts and undecodable bodies
        logger.error(f"Location lookup read error: {e}")
        return []

    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON response from location lookup: {e}")
        return []

    except (KeyError, TypeError, AttributeError) as e:
        logger.error(f"Unexpected location lookup response format: {e}")
        return []
