"""Single character symbols for the disks (used by every text encoding of the board)"""

from typing import Optional

from src.core.exceptions import InvalidNotationError
from src.core.shared_types import Disk

EMPTY_SYMBOL = "-"

SYMBOL_TO_DISK: dict[str, Disk] = {
    "x": Disk.DARK,
    "o": Disk.LIGHT,
}

DISK_TO_SYMBOL: dict[Disk, str] = {value: key for key, value in SYMBOL_TO_DISK.items()}


def disk_to_symbol(disk: Optional[Disk]) -> str:
    return DISK_TO_SYMBOL[disk] if disk is not None else EMPTY_SYMBOL


def disk_from_symbol(symbol: str) -> Optional[Disk]:
    if symbol == EMPTY_SYMBOL:
        return None
    if symbol not in SYMBOL_TO_DISK:
        raise InvalidNotationError(f"Unknown disk symbol: {symbol!r}")
    return SYMBOL_TO_DISK[symbol]
