"""
Display rotation to model-input rotation lookup.

The camera sensor is mounted at a fixed angle to the display, so the frame
has to be turned before inference to put cars upright. The quarter-turn
counts below are a calibration table for the reference device, not values
derived from the rotation angle. In particular ROTATION_180 maps to 4
quarter turns, which the rotation op reduces to 0; it is kept as measured.
"""

import numbers
from enum import IntEnum
from typing import Mapping


class DisplayRotation(IntEnum):
    """Physical display rotation, clockwise from the natural orientation."""

    ROTATION_0 = 0
    ROTATION_90 = 1
    ROTATION_180 = 2
    ROTATION_270 = 3

    @property
    def degrees(self) -> int:
        return int(self) * 90

    @classmethod
    def from_value(cls, value: "DisplayRotation | int | None") -> "DisplayRotation | None":
        """
        Interpret a surface code (0-3) or an angle in degrees (0/90/180/270).

        Returns None for anything that is neither.
        """
        if value is None:
            return None
        if isinstance(value, DisplayRotation):
            return value
        if isinstance(value, numbers.Integral) and not isinstance(value, bool):
            value = int(value)
            if 0 <= value <= 3:
                return cls(value)
            if value in (90, 180, 270):
                return cls(value // 90)
        return None


# Quarter turns applied to the frame for each display rotation
ROTATION_CALIBRATION: dict[DisplayRotation, int] = {
    DisplayRotation.ROTATION_90: 0,
    DisplayRotation.ROTATION_270: 2,
    DisplayRotation.ROTATION_180: 4,
    DisplayRotation.ROTATION_0: 3,
}

UNKNOWN_ROTATION_TURNS = 3


def resolve_rotation(
    display_rotation: "DisplayRotation | int | None",
    calibration: Mapping[DisplayRotation, int] | None = None,
) -> int:
    """
    Quarter turns to apply to a captured frame before inference.

    Args:
        display_rotation: Current display rotation (enum, surface code or degrees)
        calibration: Optional replacement for ROTATION_CALIBRATION

    Returns:
        Quarter-turn count from the calibration table (unknown rotations -> 3)
    """
    table = ROTATION_CALIBRATION if calibration is None else calibration
    rotation = DisplayRotation.from_value(display_rotation)
    if rotation is None:
        return UNKNOWN_ROTATION_TURNS
    return table.get(rotation, UNKNOWN_ROTATION_TURNS)


def calibration_from_config(config: Mapping[str, int] | None) -> dict[DisplayRotation, int]:
    """
    Build a calibration table from a config mapping of degrees to turns.

    Example config: {"0": 3, "90": 0, "180": 4, "270": 2}
    Missing entries keep the default table values.
    """
    table = dict(ROTATION_CALIBRATION)
    if not config:
        return table
    for key, turns in config.items():
        rotation = DisplayRotation.from_value(int(key))
        if rotation is not None:
            table[rotation] = int(turns)
    return table
