from __future__ import annotations

import base64
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class ReportSection:
    key: str
    step: int
    fields: Tuple[Tuple[str, str], ...]
    photos_key: Optional[str] = None


# Scoring order: stars first, then sliders, then the final confidence slider.
RATING_FIELDS: List[str] = [
    "firstWelcomeRating",
    "firstEntranceRating",
    "livingComfortRating",
    "kitchenOverallRating",
    "bathroomOverallRating",
    "bedroomCozyRating",
    "surroundingsLeisureRating",
    "livingWallsCeiling",
    "livingWindowsDoors",
    "livingFloors",
    "kitchenCabinetsCountertop",
    "kitchenSinkFaucets",
    "kitchenVentilation",
    "bathroomTilesGrout",
    "bathroomWaterPressure",
    "bathroomVentilation",
    "bedroomDaylight",
    "bedroomNoise",
    "surroundingsNoiseLevel",
    "surroundingsNeighborhood",
    "finalConfidence",
]

# 5 means "bad" on these sliders.
NEGATIVE_HIGH_FIELDS = frozenset(
    {
        "livingWallsCeiling",
        "livingWindowsDoors",
        "livingFloors",
        "kitchenCabinetsCountertop",
        "kitchenSinkFaucets",
        "kitchenVentilation",
        "bathroomWaterPressure",
        "bedroomNoise",
        "surroundingsNoiseLevel",
        "surroundingsNeighborhood",
    }
)

SCORE_SECTIONS: Dict[str, List[str]] = {
    "First Impressions": ["firstWelcomeRating", "firstEntranceRating"],
    "Living": ["livingComfortRating", "livingWallsCeiling", "livingWindowsDoors", "livingFloors"],
    "Kitchen": [
        "kitchenOverallRating",
        "kitchenCabinetsCountertop",
        "kitchenSinkFaucets",
        "kitchenVentilation",
    ],
    "Bathroom": [
        "bathroomOverallRating",
        "bathroomTilesGrout",
        "bathroomWaterPressure",
        "bathroomVentilation",
    ],
    "Bedroom": ["bedroomCozyRating", "bedroomDaylight", "bedroomNoise"],
    "Surroundings": ["surroundingsLeisureRating", "surroundingsNoiseLevel", "surroundingsNeighborhood"],
    "Final Thoughts": ["finalConfidence"],
}

REPORT_SECTIONS: List[ReportSection] = [
    ReportSection(
        key="First Impressions",
        step=2,
        photos_key="firstPhotos",
        fields=(
            ("firstWelcomeRating", "Welcome feeling (★ 1–5)"),
            ("firstEntranceRating", "Entrance ease (★ 1–5)"),
            ("firstImpressionThoughts", "First impression notes"),
        ),
    ),
    ReportSection(
        key="Living",
        step=3,
        photos_key="livingPhotos",
        fields=(
            ("livingComfortRating", "Accommodating feel (★ 1–5)"),
            ("livingWallsCeiling", "Walls & ceilings (1–5)"),
            ("livingWindowsDoors", "Windows & doors (1–5)"),
            ("livingFloors", "Floors (1–5)"),
            ("livingIssues", "Issues noticed"),
            ("livingThoughts", "Thoughts"),
        ),
    ),
    ReportSection(
        key="Kitchen",
        step=4,
        photos_key="kitchenPhotos",
        fields=(
            ("kitchenOverallRating", "Overall (★ 1–5)"),
            ("kitchenCabinetsCountertop", "Cabinets & countertop (1–5)"),
            ("kitchenSinkFaucets", "Sink & faucets (1–5)"),
            ("kitchenVentilation", "Ventilation (1–5)"),
            ("kitchenIssues", "Issues noticed"),
            ("kitchenAppliancesIncluded", "Appliances included (yes/no)"),
            ("kitchenApplianceList", "Appliance list"),
            ("kitchenFinalThoughts", "Final thoughts"),
        ),
    ),
    ReportSection(
        key="Bathroom",
        step=5,
        photos_key="bathroomPhotos",
        fields=(
            ("bathroomOverallRating", "Overall (★ 1–5)"),
            ("bathroomTilesGrout", "Tiles & grout (1–5)"),
            ("bathroomWaterPressure", "Water pressure (1–5)"),
            ("bathroomVentilation", "Ventilation (1–5)"),
            ("bathroomWaterDamage", "Visible water damage (yes/no)"),
            ("bathroomPlumbingChecklist", "Plumbing checklist"),
            ("bathroomFinalThoughts", "Final thoughts"),
        ),
    ),
    ReportSection(
        key="Bedroom",
        step=6,
        photos_key="bedroomPhotos",
        fields=(
            ("bedroomCozyRating", "Cozy/relaxing (★ 1–5)"),
            ("bedroomDaylight", "Daylight (1–5)"),
            ("bedroomCanDimLight", "Can dim/block daylight (yes/no)"),
            ("bedroomNoise", "Noise level (1–5)"),
            ("bedroomFurnitureIncluded", "Furniture included (yes/no)"),
            ("bedroomFurnitureList", "Furniture list"),
            ("bedroomFinalThoughts", "Final thoughts"),
        ),
    ),
    ReportSection(
        key="Surroundings",
        step=7,
        photos_key="surroundingsPhotos",
        fields=(
            ("surroundingsLeisureRating", "Outdoor leisure appeal (★ 1–5)"),
            ("surroundingsNoiseLevel", "Noise level (1–5)"),
            ("surroundingsNeighborhood", "Neighborhood (1–5)"),
            ("surroundingsAmenities", "Amenities"),
            ("surroundingsFinalThoughts", "Final thoughts"),
        ),
    ),
    ReportSection(
        key="Ask the Makelaar",
        step=8,
        fields=(
            ("makelaarReasonLeaving", "Why are sellers leaving?"),
            ("makelaarUtilities", "Average utilities"),
            ("makelaarRepairs", "Maintenance/repairs"),
            ("makelaarExtraNotes", "Extra notes"),
        ),
    ),
    ReportSection(
        key="Final Thoughts",
        step=9,
        fields=(
            ("finalConfidence", "Offer confidence (1–5)"),
            ("finalRedFlags", "Red flags"),
            ("finalNotes", "Other notes"),
        ),
    ),
]

# Rendered as pills rather than a joined line.
CHECKLIST_FIELDS = frozenset({"bathroomPlumbingChecklist", "surroundingsAmenities"})

PHOTO_FIELDS: List[str] = [section.photos_key for section in REPORT_SECTIONS if section.photos_key]

CONTACT_FIELDS: List[str] = ["email", "address", "date"]

# Step 1 of the wizard is the contact card; the rest map onto report sections.
STEP_TITLES: Dict[int, str] = {1: "Contact"}
STEP_TITLES.update({section.step: section.key for section in REPORT_SECTIONS})

DEFAULT_FILENAME = "Home-Tour-Notes.pdf"
UNTITLED_ADDRESS = "Untitled Address"
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._\- ]")

PhotoSource = Union[bytes, str, Path]


def new_record() -> Dict[str, object]:
    record: Dict[str, object] = {field: "" for field in CONTACT_FIELDS}
    for section in REPORT_SECTIONS:
        for field, _label in section.fields:
            if field in RATING_FIELDS:
                record[field] = 0
            elif field in CHECKLIST_FIELDS:
                record[field] = []
            else:
                record[field] = ""
        if section.photos_key:
            record[section.photos_key] = []
    record["offerDate"] = None
    return record


def get_report_section(key: str) -> ReportSection:
    for section in REPORT_SECTIONS:
        if section.key == key:
            return section
    raise KeyError(key)


def section_for_step(step: int) -> Optional[ReportSection]:
    for section in REPORT_SECTIONS:
        if section.step == step:
            return section
    return None


def encode_photo(source: PhotoSource, mime_type: str | None = None) -> str:
    if isinstance(source, (str, Path)):
        path = Path(source)
        data = path.read_bytes()
        mime_type = mime_type or mimetypes.guess_type(path.name)[0]
    else:
        data = bytes(source)
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or 'image/jpeg'};base64,{encoded}"


def append_photo(
    record: Dict[str, object], photos_key: str, source: PhotoSource, mime_type: str | None = None
) -> str:
    if photos_key not in PHOTO_FIELDS:
        raise KeyError(f"{photos_key} is not a photo field")
    data_uri = encode_photo(source, mime_type)
    photos = list(record.get(photos_key) or [])
    photos.append(data_uri)
    record[photos_key] = photos
    return data_uri


def freeze_record(record: Mapping[str, object]) -> Mapping[str, object]:
    frozen = {
        key: tuple(value) if isinstance(value, list) else value for key, value in record.items()
    }
    return MappingProxyType(frozen)


def sanitize_filename(name: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", name)


def report_filename(address: str | None, date: str | None) -> str:
    return sanitize_filename(f"Home-Tour-Notes_{address or UNTITLED_ADDRESS}_{date or ''}.pdf")
