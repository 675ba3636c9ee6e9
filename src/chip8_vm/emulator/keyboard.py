"""
Keypad for the CHIP-8 VM
========================

The CHIP-8 keypad has 16 keys labelled with the hexadecimal digits:

    1 2 3 C
    4 5 6 D
    7 8 9 E
    A 0 B F

The keypad state is 16 booleans indexed by key value. The host Input
Adapter refreshes it once per outer loop iteration, so a batch of
instructions always sees a stable snapshot.

Two host layouts are provided. QWERTY (the default) places the keypad on
the left-hand 4x4 block of a QWERTY keyboard, keeping the physical shape:

    1 2 3 4        1 2 3 C
    Q W E R   ->   4 5 6 D
    A S D F        7 8 9 E
    Z X C V        A 0 B F

HEX maps the host keys 0-9 and A-F straight onto the key of the same name.

Copyright (c) 2025 CHIP-8 VM Contributors
"""

from enum import IntEnum
from typing import Dict, Iterable, List, Optional, Tuple, Union


NUM_KEYS = 16


class KeyboardLayout(IntEnum):
    """Host keyboard layout variants."""
    QWERTY = 0  # Keypad shape on the 1-4 / Q-R / A-F / Z-V block
    HEX = 1     # Host key names equal key labels


# =============================================================================
# HOST KEY TO KEYPAD MAPPING
# =============================================================================
# Host key names are lower-case, matching pygame.key.name().

KEYS_QWERTY: Dict[str, int] = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "q": 0x4, "w": 0x5, "e": 0x6, "r": 0xD,
    "a": 0x7, "s": 0x8, "d": 0x9, "f": 0xE,
    "z": 0xA, "x": 0x0, "c": 0xB, "v": 0xF,
}

KEYS_HEX: Dict[str, int] = {f"{value:x}": value for value in range(NUM_KEYS)}

LAYOUTS: Dict[KeyboardLayout, Dict[str, int]] = {
    KeyboardLayout.QWERTY: KEYS_QWERTY,
    KeyboardLayout.HEX: KEYS_HEX,
}


def key_for_host(name: str, layout: KeyboardLayout = KeyboardLayout.QWERTY) -> Optional[int]:
    """
    Look up the keypad index for a host key name.

    Returns:
        Keypad index 0-15, or None if the host key is not mapped
    """
    return LAYOUTS[layout].get(name.lower())


class Keypad:
    """
    16-key keypad state.

    Keys can be given as an index (0-15) or as a hex digit name ("A", "f").

    Example:
        >>> kp = Keypad()
        >>> kp.key_down("A")
        >>> kp.is_pressed(0xA)
        True
        >>> kp.first_pressed()
        10
        >>> kp.key_up(10)
        >>> kp.first_pressed() is None
        True
    """

    def __init__(self):
        self._keys: List[bool] = [False] * NUM_KEYS

    @staticmethod
    def _index(key: Union[int, str]) -> int:
        if isinstance(key, str):
            try:
                index = int(key, 16)
            except ValueError:
                raise ValueError(f"Unknown key: {key!r}") from None
            if len(key) != 1:
                raise ValueError(f"Unknown key: {key!r}")
        else:
            index = key
        if not 0 <= index < NUM_KEYS:
            raise ValueError(f"Key index must be 0-15, got {index}")
        return index

    def key_down(self, key: Union[int, str]) -> None:
        """Press a key."""
        self._keys[self._index(key)] = True

    def key_up(self, key: Union[int, str]) -> None:
        """Release a key."""
        self._keys[self._index(key)] = False

    def is_pressed(self, key: Union[int, str]) -> bool:
        return self._keys[self._index(key)]

    def first_pressed(self) -> Optional[int]:
        """Lowest pressed key index, or None if no key is down."""
        for index, pressed in enumerate(self._keys):
            if pressed:
                return index
        return None

    def pressed_keys(self) -> List[int]:
        return [index for index, pressed in enumerate(self._keys) if pressed]

    def release_all(self) -> None:
        self._keys = [False] * NUM_KEYS

    def set_state(self, states: Iterable[bool]) -> None:
        """
        Replace the whole keypad state.

        Args:
            states: Exactly 16 booleans indexed by key value

        Raises:
            ValueError: If states does not hold 16 entries
        """
        keys = [bool(state) for state in states]
        if len(keys) != NUM_KEYS:
            raise ValueError(f"Keypad state needs {NUM_KEYS} entries, got {len(keys)}")
        self._keys = keys

    @property
    def state(self) -> Tuple[bool, ...]:
        """Copy of the 16 key states."""
        return tuple(self._keys)
