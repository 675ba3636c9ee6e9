"""
Cycle Scheduler for the CHIP-8 VM
=================================

Keeps emulated time in step with wall-clock time, independently of how
often the host calls in.

Each round the scheduler converts the wall-clock time elapsed since the
previous round into a whole number of instructions:

    cycles = floor(elapsed * clock_speed)

The count is taken against a fixed anchor time, so a round too short for a
single instruction does no work and its elapsed time is not lost, and the
fractional remainder of every round carries into the next one.

Every executed instruction adds one instruction period to a 60 Hz
accumulator. Each time the accumulator reaches a full timer period the
scheduler applies one timer tick to the CPU and, if the framebuffer is
dirty, hands a snapshot to the display sink and clears the dirty flag.
Timers therefore decay at a fixed real-time rate whatever the clock speed,
and the display is presented at most once per timer tick.

Copyright (c) 2025 CHIP-8 VM Contributors
"""

import logging
import math
import time
from typing import Callable, Optional

from .cpu import Chip8CPU
from .display import Framebuffer, Snapshot

logger = logging.getLogger(__name__)


DEFAULT_CLOCK_SPEED = 500
TIMER_HZ = 60

# Absorbs float error when elapsed time is an exact multiple of the period
_EPSILON = 1e-9

DisplaySink = Callable[[Snapshot], None]


class CycleScheduler:
    """
    Converts elapsed wall-clock time into instructions and timer ticks.

    Attributes:
        cpu: The CPU driven by the scheduler
        framebuffer: Framebuffer presented to the display sink
        clock_speed: Target instructions per second
        display_sink: Called with a framebuffer snapshot when a dirty frame
                      reaches a timer tick (optional)
        total_cycles: Instructions executed so far
        timer_ticks: 60 Hz timer ticks applied so far
        frames_presented: Number of display sink calls

    Example:
        >>> scheduler = CycleScheduler(cpu, framebuffer, clock_speed=600)
        >>> scheduler.start(now=0.0)
        >>> scheduler.tick(now=0.1)  # 100 ms of emulated time
        60
        >>> scheduler.timer_ticks
        6
    """

    def __init__(
        self,
        cpu: Chip8CPU,
        framebuffer: Framebuffer,
        clock_speed: int = DEFAULT_CLOCK_SPEED,
        display_sink: Optional[DisplaySink] = None,
        clock: Callable[[], float] = time.perf_counter,
        timer_hz: int = TIMER_HZ,
    ):
        if clock_speed < 1:
            raise ValueError(f"clock_speed must be a positive integer, got {clock_speed}")
        if timer_hz < 1:
            raise ValueError(f"timer_hz must be a positive integer, got {timer_hz}")

        self.cpu = cpu
        self.framebuffer = framebuffer
        self.clock_speed = clock_speed
        self.display_sink = display_sink
        self._clock = clock

        self.timer_hz = timer_hz
        # Counted in units of 1 / (clock_speed * timer_hz) seconds to stay exact
        self._timer_accumulator = 0
        self._start_time: Optional[float] = None
        self._cycles_scheduled = 0

        self.total_cycles = 0
        self.timer_ticks = 0
        self.frames_presented = 0

    def start(self, now: Optional[float] = None) -> None:
        """
        Anchor the reference time (defaults to the current clock).

        Call again after a pause so the time spent paused is not replayed.
        """
        self._start_time = self._clock() if now is None else now
        self._cycles_scheduled = 0
        logger.debug(f"Scheduler anchored at {self._start_time:.6f}s, {self.clock_speed} Hz")

    def reset(self) -> None:
        """Forget the anchor time, counters and partial timer period."""
        self._start_time = None
        self._cycles_scheduled = 0
        self._timer_accumulator = 0
        self.total_cycles = 0
        self.timer_ticks = 0
        self.frames_presented = 0

    def tick(self, now: Optional[float] = None) -> int:
        """
        Run one scheduling round.

        Args:
            now: Current time in seconds (defaults to the scheduler clock)

        Returns:
            Number of instructions executed this round
        """
        if now is None:
            now = self._clock()
        if self._start_time is None:
            self.start(now)
            return 0

        # Whole instruction periods since the anchor, minus those already run
        due = math.floor((now - self._start_time) * self.clock_speed + _EPSILON)
        cycles = due - self._cycles_scheduled
        if cycles <= 0:
            return 0

        self._cycles_scheduled = due
        return self.run_cycles(cycles)

    def run_cycles(self, count: int) -> int:
        """
        Execute up to count instructions with timer accounting.

        Stops early if the machine halts. Machine errors propagate after
        the faulting instruction.

        Returns:
            Number of instructions executed
        """
        executed = 0
        for _ in range(count):
            if self.cpu.halted:
                break
            self.cpu.step()
            executed += 1
            self.total_cycles += 1

            self._timer_accumulator += self.timer_hz
            while self._timer_accumulator >= self.clock_speed:
                self._timer_accumulator -= self.clock_speed
                self._on_timer_tick()
        return executed

    def _on_timer_tick(self) -> None:
        self.cpu.tick_timers()
        self.timer_ticks += 1
        self.present()

    def present(self) -> bool:
        """
        Hand the framebuffer to the display sink if it is dirty.

        Returns:
            True if the sink was called
        """
        if not self.framebuffer.dirty:
            return False
        if self.display_sink is not None:
            self.display_sink(self.framebuffer.snapshot())
            self.frames_presented += 1
        self.framebuffer.dirty = False
        return True
