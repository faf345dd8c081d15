"""
Type definitions used across layers
"""

from enum import StrEnum


class Disk(StrEnum):
    DARK = "dark"
    LIGHT = "light"

    def opposite(self) -> "Disk":
        return Disk.LIGHT if self == Disk.DARK else Disk.DARK

    @classmethod
    def sides(cls) -> tuple["Disk", "Disk"]:
        """Dark always plays first, so it is listed first as well."""
        return (cls.DARK, cls.LIGHT)


class Player(StrEnum):
    MANUAL = "manual"
    AUTOMATED = "automated"
