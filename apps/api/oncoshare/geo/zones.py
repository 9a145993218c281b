"""Static region -> geo-political zone mapping (Nigeria: 36 states + FCT, 6 zones).

This table is the single source of truth for zone derivation. The optional
``ng_states`` lookup table is generated from ``REGIONS``, so a database join
and an in-process lookup always return the same zone for a region.

Regions are keyed by a stable code (ISO 3166-2:NG suffix). Free text is
accepted everywhere and resolved through the code, the display name, or a
known alias after ``normalize_region_text``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from oncoshare.utils.normalization import normalize_region_text, normalize_zone_text


NORTH_CENTRAL = "North Central"
NORTH_EAST = "North East"
NORTH_WEST = "North West"
SOUTH_EAST = "South East"
SOUTH_SOUTH = "South South"
SOUTH_WEST = "South West"

ZONES: tuple[str, ...] = (
    NORTH_CENTRAL,
    NORTH_EAST,
    NORTH_WEST,
    SOUTH_EAST,
    SOUTH_SOUTH,
    SOUTH_WEST,
)

UNKNOWN_ZONE = "Unknown"


@dataclass(frozen=True)
class Region:
    code: str
    name: str
    zone: str
    aliases: tuple[str, ...] = ()

    @property
    def match_keys(self) -> frozenset[str]:
        """Every normalized text form that resolves to this region."""
        keys = {normalize_region_text(self.code), normalize_region_text(self.name)}
        keys.update(normalize_region_text(alias) for alias in self.aliases)
        keys.discard("")
        return frozenset(keys)


REGIONS: tuple[Region, ...] = (
    # North Central
    Region("BE", "Benue", NORTH_CENTRAL),
    Region("FC", "FCT", NORTH_CENTRAL, ("abuja", "federal capital territory")),
    Region("KO", "Kogi", NORTH_CENTRAL),
    Region("KW", "Kwara", NORTH_CENTRAL),
    Region("NA", "Nasarawa", NORTH_CENTRAL, ("nassarawa",)),
    Region("NI", "Niger", NORTH_CENTRAL),
    Region("PL", "Plateau", NORTH_CENTRAL),
    # North East
    Region("AD", "Adamawa", NORTH_EAST),
    Region("BA", "Bauchi", NORTH_EAST),
    Region("BO", "Borno", NORTH_EAST),
    Region("GO", "Gombe", NORTH_EAST),
    Region("TA", "Taraba", NORTH_EAST),
    Region("YO", "Yobe", NORTH_EAST),
    # North West
    Region("JI", "Jigawa", NORTH_WEST),
    Region("KD", "Kaduna", NORTH_WEST),
    Region("KN", "Kano", NORTH_WEST),
    Region("KT", "Katsina", NORTH_WEST),
    Region("KE", "Kebbi", NORTH_WEST),
    Region("SO", "Sokoto", NORTH_WEST),
    Region("ZA", "Zamfara", NORTH_WEST),
    # South East
    Region("AB", "Abia", SOUTH_EAST),
    Region("AN", "Anambra", SOUTH_EAST),
    Region("EB", "Ebonyi", SOUTH_EAST),
    Region("EN", "Enugu", SOUTH_EAST),
    Region("IM", "Imo", SOUTH_EAST),
    # South South
    Region("AK", "Akwa Ibom", SOUTH_SOUTH, ("akwaibom",)),
    Region("BY", "Bayelsa", SOUTH_SOUTH),
    Region("CR", "Cross River", SOUTH_SOUTH, ("crossriver",)),
    Region("DE", "Delta", SOUTH_SOUTH),
    Region("ED", "Edo", SOUTH_SOUTH),
    Region("RI", "Rivers", SOUTH_SOUTH),
    # South West
    Region("EK", "Ekiti", SOUTH_WEST),
    Region("LA", "Lagos", SOUTH_WEST),
    Region("OG", "Ogun", SOUTH_WEST),
    Region("ON", "Ondo", SOUTH_WEST),
    Region("OS", "Osun", SOUTH_WEST),
    Region("OY", "Oyo", SOUTH_WEST),
)


class ZoneResolver:
    """
    In-memory region/zone lookups, built once from a region table.

    All lookups are pure; unknown input never raises.
    """

    def __init__(self, regions: Iterable[Region] = REGIONS):
        self._regions: dict[str, Region] = {}
        self._by_key: dict[str, Region] = {}
        self._by_zone: dict[str, list[Region]] = {zone: [] for zone in ZONES}
        self._zone_by_key: dict[str, str] = {
            normalize_zone_text(zone): zone for zone in ZONES
        }

        for region in regions:
            if region.zone not in self._by_zone:
                raise ValueError(f"Region {region.code} has unknown zone {region.zone!r}")
            if region.code in self._regions:
                raise ValueError(f"Duplicate region code {region.code}")
            self._regions[region.code] = region
            self._by_zone[region.zone].append(region)
            for key in region.match_keys:
                existing = self._by_key.get(key)
                if existing is not None and existing.code != region.code:
                    raise ValueError(f"Region key {key!r} is ambiguous")
                self._by_key[key] = region

    @property
    def regions(self) -> tuple[Region, ...]:
        return tuple(self._regions.values())

    def region_for(self, value: str | None) -> Region | None:
        """Resolve a region code, name, or alias to its Region."""
        return self._by_key.get(normalize_region_text(value))

    def zone_of(self, value: str | None) -> str:
        """Zone for a region code or free-text region; UNKNOWN_ZONE if unrecognized."""
        region = self.region_for(value)
        return region.zone if region else UNKNOWN_ZONE

    def canonical_zone(self, value: str | None) -> str | None:
        """Map "south_west", " South West " etc. to the canonical zone name."""
        return self._zone_by_key.get(normalize_zone_text(value))

    def regions_in_zones(self, zones: Iterable[str]) -> frozenset[str]:
        """Region codes belonging to any of ``zones`` (unknown zones are ignored)."""
        codes: set[str] = set()
        for zone in zones:
            canonical = self.canonical_zone(zone)
            if canonical is None:
                continue
            codes.update(region.code for region in self._by_zone[canonical])
        return frozenset(codes)

    def match_keys_for_codes(self, codes: Iterable[str]) -> frozenset[str]:
        """Normalized text keys that identify the given region codes."""
        keys: set[str] = set()
        for code in codes:
            region = self._regions.get(code)
            if region is not None:
                keys.update(region.match_keys)
        return frozenset(keys)

    def match_keys_for_states(self, states: Iterable[str]) -> frozenset[str]:
        """
        Normalized keys for a state filter.

        Recognized states expand to all spellings of that region; anything
        else is matched by its normalized text only.
        """
        keys: set[str] = set()
        for state in states:
            region = self.region_for(state)
            if region is not None:
                keys.update(region.match_keys)
            else:
                normalized = normalize_region_text(state)
                if normalized:
                    keys.add(normalized)
        return frozenset(keys)

    def zone_by_match_key(self) -> dict[str, str]:
        """Every normalized key mapped to its zone (used for SQL CASE expressions)."""
        return {key: region.zone for key, region in self._by_key.items()}


zone_resolver = ZoneResolver()
