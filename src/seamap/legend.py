"""
Legend construction for colorized overlays.

A Legend is the user-facing key of a ColorMapping. Labels are produced by an
optional label transform (for example undoing a log10 value transform so the
legend reads in concentration units). The transform only shapes the text; the
mapping's domain and breaks are never modified.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from src.seamap.color_mapping import BINNED, ColorMapping

logger = logging.getLogger(__name__)

GRADIENT = "gradient"
BINS = "bins"

# Number of color stops used to draw a continuous gradient bar
GRADIENT_STOPS = 16


def identity(x):
    return x


def power_of_ten(digits=2):
    """Label transform undoing a log10 value transform: round(10 ** x, digits)."""

    def transform(x):
        return round(10.0 ** x, digits)

    return transform


def round_to(digits=1):
    """Label transform rounding values to a number of decimals."""

    def transform(x):
        return round(x, digits)

    return transform


def format_number(value, digits=3):
    """Format a number with at most `digits` significant digits, without exponent notation."""
    value = float(value)
    if not np.isfinite(value):
        return str(value)
    if value == 0:
        return "0"
    text = np.format_float_positional(value, precision=digits, unique=True, fractional=False, trim="-")
    return text


def label_format(transform=None, digits=3, prefix="", suffix="", between=" – "):
    """
    Create a label formatter.

    Args:
        transform: Display-only function applied to each value before formatting
        digits: Significant digits kept in labels
        prefix: Text placed before each number
        suffix: Text placed after each number (e.g. units)
        between: Separator for bin ranges

    Returns:
        function: formatter(values) -> str, accepting one value or a (lo, hi) pair
    """
    transform = transform or identity

    def formatter(*values):
        parts = [f"{prefix}{format_number(transform(v), digits)}{suffix}" for v in values]
        return between.join(parts)

    return formatter


@dataclass
class LegendEntry:
    label: str
    color: str


@dataclass
class Legend:
    """
    User-facing key for a color mapping.

    Attributes:
        title: Legend heading (may include units)
        kind: 'gradient' for continuous mappings, 'bins' for binned ones
        entries: Ordered (label, color) pairs, low values first
        gradient: Color stops for the gradient bar (gradient legends only)
        position: Leaflet control corner
        opacity: Swatch opacity
    """

    title: str
    kind: str
    entries: List[LegendEntry] = field(default_factory=list)
    gradient: List[str] = field(default_factory=list)
    position: str = "bottomright"
    opacity: float = 1.0

    @property
    def labels(self) -> List[str]:
        return [entry.label for entry in self.entries]

    def to_html(self) -> str:
        """Render the legend as a self-contained HTML block."""
        title = html.escape(self.title)
        box_style = (
            "background: white; padding: 6px 8px; border-radius: 5px; "
            "box-shadow: 0 0 15px rgba(0,0,0,0.2); font: 12px/1.4 Arial, sans-serif; "
            f"opacity: {self.opacity};"
        )
        rows = []
        if self.kind == GRADIENT:
            # Highest value on top, matching the vertical gradient bar
            stops = ", ".join(self.gradient[::-1])
            labels = "".join(
                f'<div style="flex: 1; display: flex; align-items: center;">'
                f"{html.escape(entry.label)}</div>"
                for entry in self.entries[::-1]
            )
            rows.append(
                '<div style="display: flex; height: 120px;">'
                f'<div style="width: 14px; margin-right: 6px; background: linear-gradient({stops});"></div>'
                f'<div style="display: flex; flex-direction: column; justify-content: space-between;">{labels}</div>'
                "</div>"
            )
        else:
            for entry in self.entries:
                rows.append(
                    '<div style="display: flex; align-items: center;">'
                    f'<span style="display: inline-block; width: 14px; height: 14px; '
                    f'margin-right: 6px; background: {entry.color};"></span>'
                    f"{html.escape(entry.label)}</div>"
                )
        return (
            f'<div class="seamap-legend" style="{box_style}">'
            f"<strong>{title}</strong>{''.join(rows)}</div>"
        )


def build_legend(
    mapping: ColorMapping,
    title: str,
    label_transform: Optional[Callable] = None,
    digits: int = 3,
    n_ticks: int = 5,
    suffix: str = "",
    position: str = "bottomright",
    opacity: float = 1.0,
) -> Legend:
    """
    Build a legend for a color mapping.

    Continuous mappings get n_ticks evenly spaced labels across the domain and
    a gradient bar; binned mappings get one 'lo - hi' entry per bucket.

    Args:
        mapping: ColorMapping to describe
        title: Legend title
        label_transform: Display-only transform applied to label values
        digits: Significant digits in labels
        n_ticks: Number of labels for continuous legends
        suffix: Text appended to every number
        position: Leaflet control corner
        opacity: Swatch opacity

    Returns:
        Legend
    """
    formatter = label_format(transform=label_transform, digits=digits, suffix=suffix)
    vmin, vmax = mapping.domain

    if mapping.kind == BINNED:
        entries = [
            LegendEntry(formatter(lo, hi), color)
            for lo, hi, color in zip(mapping.breaks[:-1], mapping.breaks[1:], mapping.bin_colors)
        ]
        legend = Legend(title, BINS, entries, position=position, opacity=opacity)
    else:
        if n_ticks < 2 or vmin == vmax:
            ticks = np.array([vmin]) if vmin == vmax else np.array([vmin, vmax])
        else:
            ticks = np.linspace(vmin, vmax, n_ticks)
        entries = [LegendEntry(formatter(t), mapping.to_hex(t)) for t in ticks]
        gradient = [mapping.to_hex(v) for v in np.linspace(vmin, vmax, GRADIENT_STOPS)]
        legend = Legend(title, GRADIENT, entries, gradient, position=position, opacity=opacity)

    logger.debug(f"Legend '{title}': {', '.join(legend.labels)}")
    return legend
