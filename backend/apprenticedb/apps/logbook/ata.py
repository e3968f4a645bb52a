# backend/apprenticedb/apps/logbook/ata.py
"""
ATA chapter classification for logbook entries.

Entries carry the chapter as a first-class `ata_chapter_code`. Older rows
(and clients that still read them) use the legacy encoding: a one-element
`skills_practiced` list holding `"ATA: <code> - <name>"`. The helpers here
convert in both directions so either form can be read back into a code.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional, Sequence

ATA_CHAPTERS: Dict[str, str] = {
    "00": "00 - General",
    "05": "05 - Time Limits/Maintenance Checks",
    "06": "06 - Dimensions & Areas",
    "07": "07 - Lifting & Shoring",
    "08": "08 - Leveling & Weighing",
    "09": "09 - Towing & Taxiing",
    "10": "10 - Parking, Mooring, Storage",
    "11": "11 - Placards & Markings",
    "12": "12 - Servicing",
    "20": "20 - Standard Practices - Airframe",
    "21": "21 - Air Conditioning",
    "23": "23 - Communications",
    "24": "24 - Electrical Power",
    "25": "25 - Equipment/Furnishings",
    "26": "26 - Fire Protection",
    "27": "27 - Flight Controls",
    "28": "28 - Fuel",
    "29": "29 - Hydraulic Power",
    "30": "30 - Ice & Rain Protection",
    "31": "31 - Indicating/Recording Systems",
    "32": "32 - Landing Gear",
    "33": "33 - Lights",
    "34": "34 - Navigation",
    "35": "35 - Oxygen",
    "36": "36 - Pneumatic",
    "38": "38 - Water/Waste",
    "49": "49 - Airborne Auxiliary Power",
    "51": "51 - Structures",
    "52": "52 - Doors",
    "53": "53 - Fuselage",
    "54": "54 - Nacelles/Pylons",
    "55": "55 - Stabilizers",
    "56": "56 - Windows",
    "57": "57 - Wings",
    "61": "61 - Propellers/Propulsors",
    "71": "71 - Powerplant",
    "72": "72 - Engine - Turbine/Turbo Prop",
    "73": "73 - Engine Fuel & Control",
    "74": "74 - Ignition",
    "75": "75 - Air",
    "76": "76 - Engine Controls",
    "77": "77 - Engine Indicating",
    "78": "78 - Exhaust",
    "79": "79 - Oil",
    "80": "80 - Starting",
    "91": "91 - Charts",
}

# Coverage denominator used by the progress views.
TOTAL_ATA_CHAPTERS = 46

LEGACY_PREFIX = "ATA: "

_LABEL_CODE_RE = re.compile(r"^(\d+)\s*-")
_LEGACY_PREFIX_RE = re.compile(r"^\s*ATA:\s*")


def label_for(code: str) -> str:
    """Canonical label for a chapter code; unknown codes come back unchanged."""
    return ATA_CHAPTERS.get(code, code)


def code_from_label(label: Optional[str]) -> Optional[str]:
    if not label:
        return None
    match = _LABEL_CODE_RE.match(label)
    return match.group(1) if match else None


def to_legacy_skills(code: str) -> list:
    return [f"{LEGACY_PREFIX}{label_for(code)}"]


def code_from_legacy_skills(skills: Optional[Sequence[str]]) -> Optional[str]:
    """
    Read the chapter code out of a legacy `skills_practiced` list.

    Only the first element is meaningful. A value that was stored for an
    unmapped code has no "<code> -" part and yields None.
    """
    if not skills:
        return None
    first = skills[0]
    if not isinstance(first, str):
        return None
    return code_from_label(_LEGACY_PREFIX_RE.sub("", first, count=1))


def entry_chapter_code(entry: Any) -> Optional[str]:
    """Chapter code of an entry, falling back to the legacy list."""
    code = getattr(entry, "ata_chapter_code", None)
    if code:
        return code
    return code_from_legacy_skills(getattr(entry, "skills_practiced", None))
