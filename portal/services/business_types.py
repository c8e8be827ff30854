# portal/services/business_types.py
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

BUSINESS_TYPES: Tuple[str, ...] = (
    "fitness",
    "restaurant",
    "retail",
    "salon_spa",
    "professional_services",
    "other",
)

BUSINESS_TYPE_LABELS: Dict[str, str] = {
    "fitness": "Fitness & Gym",
    "restaurant": "Restaurant & Cafe",
    "retail": "Retail Store",
    "salon_spa": "Salon & Spa",
    "professional_services": "Professional Services",
    "other": "Other",
}

_PHOTO_TAGS: Dict[str, List[str]] = {
    "fitness": ["Equipment", "Classes", "Trainers", "Facility", "Members", "Logo"],
    "restaurant": ["Food", "Drinks", "Interior", "Exterior", "Staff", "Menu", "Logo"],
    "retail": ["Products", "Storefront", "Interior", "Displays", "Staff", "Logo"],
    "salon_spa": ["Services", "Interior", "Treatments", "Products", "Team", "Logo"],
    "professional_services": ["Team", "Office", "Clients", "Events", "Headshots", "Logo"],
}

GENERIC_PHOTO_TAGS: List[str] = ["Team", "Location", "Products", "Services", "Events", "Logo"]


def is_business_type(value: Optional[str]) -> bool:
    return value in BUSINESS_TYPES


def photo_tags_for(business_type: Optional[str]) -> List[str]:
    """Default photo tag set for a business type; unknown types get the generic set."""
    return list(_PHOTO_TAGS.get(business_type or "", GENERIC_PHOTO_TAGS))
