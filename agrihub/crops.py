"""
Supported crops and name normalisation.

Crop identifiers arrive from user settings and external configuration as free
text ("Paddy", "padi", "chilli"...). They are resolved to the closed `Crop`
set here; anything unrecognized resolves to None and downstream code treats it
as "no rules apply" rather than an error.
"""

from enum import Enum


class Crop(str, Enum):
    RICE   = "rice"
    MAIZE  = "maize"
    CHILI  = "chili"
    TOMATO = "tomato"


CROP_DISPLAY_NAMES: dict[Crop, str] = {
    Crop.RICE:   "Rice (Oryza sativa)",
    Crop.MAIZE:  "Maize (Zea mays)",
    Crop.CHILI:  "Chili (Capsicum spp.)",
    Crop.TOMATO: "Tomato (Solanum lycopersicum)",
}

# ---------------------------------------------------------------------------
# Alias spellings → canonical identifier
# Covers English variants and the Indonesian names used by older configs.
# ---------------------------------------------------------------------------
CROP_NAME_MAP: dict[str, Crop] = {
    # rice
    "paddy": Crop.RICE, "padi": Crop.RICE, "beras": Crop.RICE,
    # maize
    "corn": Crop.MAIZE, "jagung": Crop.MAIZE,
    # chili
    "chilli": Crop.CHILI, "chillies": Crop.CHILI, "chilies": Crop.CHILI,
    "chile": Crop.CHILI, "cabai": Crop.CHILI, "cabe": Crop.CHILI,
    "pepper": Crop.CHILI,
    # tomato
    "tomatoes": Crop.TOMATO, "tomat": Crop.TOMATO,
}


def parse_crop(value) -> Crop | None:
    """Resolve a crop identifier or alias. Returns None for unsupported values."""
    if isinstance(value, Crop):
        return value
    if value is None:
        return None
    clean = str(value).strip().lower()
    if not clean:
        return None
    try:
        return Crop(clean)
    except ValueError:
        return CROP_NAME_MAP.get(clean)


def crop_label(value) -> str:
    """Human-readable crop name; unknown crops are shown as given."""
    crop = parse_crop(value)
    if crop is None:
        return str(value)
    return CROP_DISPLAY_NAMES[crop]
