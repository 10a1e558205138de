"""Location normalization and coordinate lookup for the globe view.

Normalization rules are checked in order and the first match wins, so
specific places (an island, an estate) must come before the city, state
or region that contains them.
"""

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

Coords = tuple[float, float]  # (lat, lng)


@dataclass(frozen=True)
class LocationRule:
    """Display name plus the lowercase patterns that map onto it."""

    name: str
    patterns: tuple[str, ...]
    _regexes: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Word boundaries keep short patterns ("la", "dc") from matching inside words
        regexes = tuple(
            re.compile(rf"(?<![a-z0-9]){re.escape(p.lower())}(?![a-z0-9])")
            for p in self.patterns
        )
        object.__setattr__(self, "_regexes", regexes)

    def matches(self, location_lower: str) -> bool:
        return any(r.search(location_lower) for r in self._regexes)


@dataclass(frozen=True)
class LocationMatch:
    name: str
    coords: Coords


DEFAULT_RULES: tuple[LocationRule, ...] = (
    # Estates and islands
    LocationRule("Little St. James", ("little st. james", "little st james", "little saint james")),
    LocationRule("Great St. James", ("great st. james", "great st james")),
    LocationRule("Zorro Ranch", ("zorro ranch",)),
    LocationRule("Palm Beach", ("palm beach",)),
    # Cities
    LocationRule("New York", ("new york", "manhattan", "nyc")),
    LocationRule("Miami", ("miami",)),
    LocationRule("Los Angeles", ("los angeles", "la")),
    LocationRule("Washington DC", ("washington", "d.c.", "dc")),
    LocationRule("Boston", ("harvard", "cambridge", "boston")),
    LocationRule("Santa Fe", ("santa fe",)),
    LocationRule("London", ("london",)),
    LocationRule("Paris", ("paris",)),
    LocationRule("Tel Aviv", ("tel aviv",)),
    LocationRule("Tokyo", ("tokyo",)),
    # Regions
    LocationRule("US Virgin Islands", ("virgin island", "st. thomas", "st thomas", "st. james", "st james")),
    LocationRule("New Mexico", ("new mexico",)),
    LocationRule("Florida", ("florida",)),
    LocationRule("Caribbean", ("caribbean",)),
)

LOCATION_COORDS: dict[str, Coords] = {
    # USA
    "Palm Beach": (26.7056, -80.0364),
    "New York": (40.7128, -74.0060),
    "Manhattan": (40.7831, -73.9712),
    "Miami": (25.7617, -80.1918),
    "Florida": (27.6648, -81.5158),
    "Los Angeles": (34.0522, -118.2437),
    "Las Vegas": (36.1699, -115.1398),
    "Washington DC": (38.9072, -77.0369),
    "Boston": (42.3601, -71.0589),
    "Cambridge": (42.3736, -71.1097),
    "Zorro Ranch": (35.2264, -105.8742),
    "Santa Fe": (35.6870, -105.9378),
    "New Mexico": (34.5199, -105.8701),
    "Ohio": (40.4173, -82.9071),
    "Texas": (31.9686, -99.9018),
    "California": (36.7783, -119.4179),
    "Arizona": (34.0489, -111.0937),
    "New Jersey": (40.0583, -74.4057),
    "Connecticut": (41.6032, -73.0877),
    # Caribbean
    "Little St. James": (18.2969, -64.8256),
    "Great St. James": (18.3122, -64.8330),
    "St. Thomas": (18.3381, -64.8941),
    "US Virgin Islands": (18.3358, -64.8963),
    "Caribbean": (18.0, -65.0),
    # Europe
    "London": (51.5074, -0.1278),
    "Paris": (48.8566, 2.3522),
    "France": (46.2276, 2.2137),
    "Monaco": (43.7384, 7.4246),
    "Switzerland": (46.8182, 8.2275),
    # Other
    "Tel Aviv": (32.0853, 34.7818),
    "Israel": (31.0461, 34.8516),
    "Tokyo": (35.6762, 139.6503),
    "Japan": (36.2048, 138.2529),
    "Morocco": (31.7917, -7.0926),
    "Australia": (-25.2744, 133.7751),
}

# Placeholders that never resolve to a place
UNRESOLVED_NAMES = frozenset({"", "unknown", "international", "unspecified", "n/a", "none"})


class LocationResolver:
    """Resolves free-text locations to a display name and coordinates."""

    def __init__(
        self,
        rules: tuple[LocationRule, ...] = DEFAULT_RULES,
        coords: dict[str, Coords] | None = None,
    ) -> None:
        self.rules = rules
        self.coords = coords if coords is not None else LOCATION_COORDS
        self._coords_lower = {k.lower(): v for k, v in self.coords.items()}

    def normalize(self, location: str | None) -> str:
        """Display name for a location; the first matching rule wins."""
        if not location or not location.strip():
            return "Unknown"
        text = location.strip()
        lower = text.lower()
        for rule in self.rules:
            if rule.matches(lower):
                return rule.name
        return text

    def get_coords(self, location: str | None) -> Coords | None:
        """Coordinates for a raw location string, or None if unknown."""
        if not location:
            return None
        text = location.strip()
        lower = text.lower()
        if lower in UNRESOLVED_NAMES:
            return None

        direct = self._coords_lower.get(lower)
        if direct:
            return direct

        # Partial match; the table lists specific places before regions
        for key, coords in self.coords.items():
            key_lower = key.lower()
            if key_lower in lower or (len(lower) >= 4 and lower in key_lower):
                return coords

        normalized = self.normalize(text)
        return self.coords.get(normalized)

    def resolve(self, location: str | None) -> LocationMatch | None:
        """Display name and coordinates, or None when the record is unlocated."""
        if not location or location.strip().lower() in UNRESOLVED_NAMES:
            return None
        name = self.normalize(location)
        coords = self.coords.get(name) or self.get_coords(location)
        if coords is None:
            return None
        return LocationMatch(name=name, coords=coords)


default_resolver = LocationResolver()


def normalize_location(location: str | None) -> str:
    return default_resolver.normalize(location)


def get_location_coords(location: str | None) -> Coords | None:
    return default_resolver.get_coords(location)
