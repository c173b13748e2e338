"""Hex chart palette shared by every distribution calculator."""
from __future__ import annotations

BRAND_PRIMARY = "#7F56D9"
BRAND_SECONDARY = "#9E77ED"
BRAND_TERTIARY = "#D6BBFB"

BLUE = "#2E90FA"
PURPLE = "#7F56D9"
GREEN = "#12B76A"
ORANGE = "#F79009"
RED = "#F04438"
GRAY = "#98A2B3"

# Reserved for categories without an assigned colour.
FALLBACK = GRAY
