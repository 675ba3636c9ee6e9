"""
pygame Host for the CHIP-8 VM
=============================

Connects an Emulator to a pygame window:

- Display Sink: paints each presented framebuffer snapshot, white pixels
  on black, scaled by the configured factor
- Input Adapter: once per loop iteration reads the host keyboard through
  the configured layout and writes all 16 keypad states at once
- Controls: window close or Escape quits, Space toggles pause, Return
  executes a single instruction while paused

The host owns the only loop; the emulator itself never sleeps or polls.

Copyright (c) 2025 CHIP-8 VM Contributors
"""

import logging
from typing import Dict, List, Optional, Sequence

import pygame

from ..errors import HostError, MachineError
from .display import SCREEN_HEIGHT, SCREEN_WIDTH, Snapshot
from .emulator import Emulator
from .keyboard import LAYOUTS, NUM_KEYS, KeyboardLayout

logger = logging.getLogger(__name__)


PIXEL_ON = (255, 255, 255)
PIXEL_OFF = (0, 0, 0)

# Milliseconds to yield between loop iterations
LOOP_WAIT_MS = 1


def build_keymap(layout: KeyboardLayout) -> Dict[int, int]:
    """
    Map pygame key codes to keypad indices for a layout.

    Host key names are single digits or letters, each with a pygame.K_*
    constant of the same name.

    Returns:
        {pygame key code: keypad index}
    """
    return {getattr(pygame, f"K_{name}"): index for name, index in LAYOUTS[layout].items()}


def keypad_state(pressed: Sequence[bool], keymap: Dict[int, int]) -> List[bool]:
    """
    Translate a pygame pressed-key table into 16 keypad booleans.

    Args:
        pressed: Result of pygame.key.get_pressed() (indexable by key code)
        keymap: Output of build_keymap()
    """
    state = [False] * NUM_KEYS
    for key_code, index in keymap.items():
        if pressed[key_code]:
            state[index] = True
    return state


class PygameHost:
    """
    Window, renderer and keyboard for one emulator.

    Example:
        >>> emu = Emulator(EmulatorConfig(rom_path=Path("pong.ch8"), scale=10))
        >>> PygameHost(emu).run()
    """

    def __init__(self, emulator: Emulator, title: str = "CHIP-8"):
        self.emulator = emulator
        self.scale = emulator.config.scale
        self.title = title
        self.keymap: Dict[int, int] = {}
        self._window: Optional[pygame.Surface] = None

    def open(self) -> None:
        """
        Create the window and register the display sink.

        Raises:
            HostError: If pygame cannot create the window
        """
        try:
            pygame.init()
            self._window = pygame.display.set_mode(
                (SCREEN_WIDTH * self.scale, SCREEN_HEIGHT * self.scale)
            )
            pygame.display.set_caption(self.title)
            self.keymap = build_keymap(self.emulator.config.layout)
        except pygame.error as e:
            pygame.quit()
            raise HostError(f"cannot create window: {e}") from e

        self._window.fill(PIXEL_OFF)
        pygame.display.flip()
        self.emulator.display_sink = self.present
        logger.debug(
            f"Window {SCREEN_WIDTH * self.scale}x{SCREEN_HEIGHT * self.scale} "
            f"(scale {self.scale})"
        )

    def close(self) -> None:
        self.emulator.display_sink = None
        self._window = None
        pygame.quit()

    # =========================================================================
    # Display Sink
    # =========================================================================

    def present(self, frame: Snapshot) -> None:
        """Paint a framebuffer snapshot and flip the window."""
        if self._window is None:
            return
        self._window.fill(PIXEL_OFF)
        for y, row in enumerate(frame):
            for x, lit in enumerate(row):
                if lit:
                    self._window.fill(
                        PIXEL_ON,
                        (x * self.scale, y * self.scale, self.scale, self.scale),
                    )
        pygame.display.flip()

    # =========================================================================
    # Input Adapter and Controls
    # =========================================================================

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.emulator.quit()
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.emulator.quit()
            elif event.key == pygame.K_SPACE:
                self.emulator.toggle_pause()
            elif event.key == pygame.K_RETURN:
                self.emulator.request_step()

    def poll_input(self) -> None:
        """Process pending window events and refresh the keypad."""
        for event in pygame.event.get():
            self.handle_event(event)
        self.emulator.set_keys(keypad_state(pygame.key.get_pressed(), self.keymap))

    # =========================================================================
    # Main Loop
    # =========================================================================

    def run(self) -> None:
        """
        Run until the machine halts or the user quits.

        Raises:
            HostError: If the window cannot be created
            MachineError: If the program faults (after the window closes)
        """
        self.open()
        try:
            while not self.emulator.halted:
                self.poll_input()
                try:
                    self.emulator.tick()
                except MachineError as e:
                    logger.error(f"Machine fault: {e}")
                    logger.debug(self.emulator.cpu.format_state())
                    raise
                pygame.time.wait(LOOP_WAIT_MS)
        finally:
            self.close()
