# healthscan/classify/domains.py
"""Screening domains and their per-domain defaults."""
from enum import Enum
from typing import Dict, Tuple


class Domain(Enum):
    """One independent classification task."""
    TEETH = "teeth"
    EYE = "eye"

    @property
    def title(self) -> str:
        return DOMAIN_TITLES[self]


DOMAIN_TITLES: Dict[Domain, str] = {
    Domain.TEETH: "Dental",
    Domain.EYE: "Eye",
}

# Used when the label resource cannot be read
FALLBACK_LABELS: Dict[Domain, Tuple[str, ...]] = {
    Domain.TEETH: ("Healthy", "Cavity", "Gingivitis", "Periodontitis", "Calculus"),
    Domain.EYE: ("Cataract", "diabetic_retinopathy", "glaucoma", "Normal"),
}


def parse_mode(mode: str) -> Tuple[Domain, ...]:
    """
    Map a display mode string to the domains it activates.

    'both' -> (TEETH, EYE); 'teeth' / 'eye' -> that domain only.
    """
    mode = mode.strip().lower()
    if mode == "both":
        return (Domain.TEETH, Domain.EYE)
    return (Domain(mode),)
