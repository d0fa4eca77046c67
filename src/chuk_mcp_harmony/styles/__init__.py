"""
Style system - cost-weight bundles that price harmonic choices.

Styles don't pick chords, they make some choices cheaper than others.
Four presets ship with the package; projects may add their own.
"""

from chuk_mcp_harmony.styles.loader import ProfileLoader
from chuk_mcp_harmony.styles.profiles import (
    BALANCED,
    BUILTIN_PROFILES,
    DEFAULT_PROFILE,
    GOSPEL_DRIVE,
    POP_RADIO,
    SMOOTH_BALLAD,
    UnknownStyleError,
    get_profile,
    list_profiles,
)

__all__ = [
    "BALANCED",
    "BUILTIN_PROFILES",
    "DEFAULT_PROFILE",
    "GOSPEL_DRIVE",
    "POP_RADIO",
    "ProfileLoader",
    "SMOOTH_BALLAD",
    "UnknownStyleError",
    "get_profile",
    "list_profiles",
]
