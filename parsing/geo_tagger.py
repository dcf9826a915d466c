"""
Geo Tagger - pull geographic references out of agenda item titles

One pure function per source domain. Each takes a title (possibly None or
empty) and returns that domain's tag model. No I/O, never raises; a missed
entity is acceptable, a crash on odd input is not.

Dedup rules differ on purpose:
- precincts, addresses, trustee districts, schools, routes: unique, first-seen order
- named areas / transit locations: one entry per matching phrase, in phrase-list
  order, so the same place can show up twice under different phrases
"""

import re
from typing import Iterable, List, Optional

from vendors.schemas import CountyGeoTags, SchoolGeoTags, TransitGeoTags


STREET_ADDRESS_PATTERN = re.compile(
    r"\d+\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?\s+"
    r"(?:St|Ave|Blvd|Dr|Rd|Ln|Way|Pkwy|Hwy|Loop|Fwy|Circle|Ct|Place|Pl)\b"
)

PRECINCT_PATTERN = re.compile(r"precinct\s*(\d)", re.IGNORECASE)

FLOOD_CONTROL_PATTERN = re.compile(
    r"flood|drainage|bayou|watershed|storm\s*water|levee", re.IGNORECASE
)

COUNTY_AREA_PATTERNS = [
    re.compile(p, re.IGNORECASE) for p in [
        r"harris county", r"memorial", r"katy", r"spring", r"cypress",
        r"tomball", r"humble", r"baytown", r"pasadena", r"clear lake",
        r"pearland", r"sugar land", r"missouri city",
    ]
]

# Longest numerals first so "District IV" is IV, not I
TRUSTEE_DISTRICT_PATTERN = re.compile(
    r"district\s+(IX|IV|VI{0,3}|I{1,3})\b", re.IGNORECASE
)

SCHOOL_NAME_PATTERN = re.compile(
    r"\b[A-Z][A-Za-z'-]+(?:\s+[A-Z][A-Za-z'-]+)*\s+(?:Elementary|Middle|High)\s+School\b"
)

TRANSIT_ROUTE_PATTERN = re.compile(r"route\s*\d+|line\s+\w+", re.IGNORECASE)

TRANSIT_LOCATION_PATTERNS = [
    re.compile(p, re.IGNORECASE) for p in [
        r"downtown", r"uptown", r"midtown", r"galleria",
        r"medical center", r"nrg", r"hobby", r"iah",
        r"northwest transit", r"southeast", r"northeast", r"southwest",
        r"park\s*(?:and|&)\s*ride", r"transit center",
    ]
]


def _unique(values: Iterable[str]) -> List[str]:
    """Drop repeats, keep first-seen order"""
    return list(dict.fromkeys(values))


def _first_match_per_phrase(text: str, patterns: List[re.Pattern]) -> List[str]:
    matches = []
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            matches.append(match.group(0))
    return matches


def extract_street_addresses(title: Optional[str]) -> List[str]:
    """Street addresses like "1001 Preston St", case preserved, deduplicated"""
    return _unique(STREET_ADDRESS_PATTERN.findall(title or ""))


def tag_harris_county(title: Optional[str]) -> CountyGeoTags:
    """Tag a Commissioners Court item title

    >>> tag_harris_county("Drainage improvements in Precinct 3 near 1200 Baker St")
    CountyGeoTags(precincts=['3'], addresses=['1200 Baker St'], areas=[], flood_control=True)
    """
    text = title or ""
    return CountyGeoTags(
        precincts=_unique(PRECINCT_PATTERN.findall(text)),
        addresses=extract_street_addresses(text),
        areas=_first_match_per_phrase(text, COUNTY_AREA_PATTERNS),
        flood_control=bool(FLOOD_CONTROL_PATTERN.search(text)),
    )


def tag_hisd(title: Optional[str]) -> SchoolGeoTags:
    """Tag a Board of Education item title"""
    text = title or ""
    districts = [m.upper() for m in TRUSTEE_DISTRICT_PATTERN.findall(text)]
    return SchoolGeoTags(
        trustee_districts=_unique(districts),
        schools=_unique(SCHOOL_NAME_PATTERN.findall(text)),
        addresses=extract_street_addresses(text),
    )


def tag_metro(title: Optional[str]) -> TransitGeoTags:
    """Tag a METRO board item title"""
    text = title or ""
    return TransitGeoTags(
        routes=_unique(TRANSIT_ROUTE_PATTERN.findall(text)),
        locations=_first_match_per_phrase(text, TRANSIT_LOCATION_PATTERNS),
    )
