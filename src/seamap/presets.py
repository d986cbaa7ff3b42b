"""
Overlay recipes for the standard oceanographic layers.

Each function returns a fresh OverlayStyle so callers can tweak fields
without affecting other layers.
"""

import numpy as np

from src.seamap.color_mapping import BINNED, CONTINUOUS
from src.seamap.legend import power_of_ten, round_to
from src.seamap.renderer import OverlayStyle
from src.seamap.transforms import log10_scale

# Depth reclassification: land flattened to 0, depths at or below 200 m dropped
DEPTH_RECLASS_RULES = [
    (0.0, np.inf, 0.0),
    (-np.inf, -200.0, np.nan),
]

CHLOROPHYLL_EPSILON = 1e-5


def sst_style(group="SST", title="SST (°C)"):
    """Sea-surface temperature: three-color blue to pale yellow ramp."""
    return OverlayStyle(
        group=group,
        title=title,
        palette=["#0C2C84", "#41B6C4", "#FFFFCC"],
        kind=CONTINUOUS,
        label_transform=round_to(1),
    )


def chlorophyll_style(group="Chla", title="Chla (mg/m³)", epsilon=CHLOROPHYLL_EPSILON):
    """
    Chlorophyll-a: log10-compressed values, legend in mg/m³.

    Concentrations span orders of magnitude, so colors are assigned on
    log10(x + epsilon) and the legend undoes the log for display.
    """
    return OverlayStyle(
        group=group,
        title=title,
        palette="jet",
        bias=0.75,
        kind=CONTINUOUS,
        value_transforms=[log10_scale(epsilon)],
        label_transform=power_of_ten(2),
    )


def depth_style(group="Depth", title="Depth (m)", bins=10):
    """
    Bathymetry: land flattened to 0, depths at or below 200 m dropped, binned colors.

    Rules are closed on the right and unmatched cells keep their depth.
    """
    return OverlayStyle(
        group=group,
        title=title,
        palette="YlGnBu",
        kind=BINNED,
        bins=bins,
        reverse=True,
        reclass_rules=DEPTH_RECLASS_RULES,
        reclass_right=True,
        reclass_others=None,
        label_transform=round_to(1),
        label_digits=6,
    )


PRESETS = {
    "sst": sst_style,
    "chlorophyll": chlorophyll_style,
    "depth": depth_style,
}
