"""
Emulator Integration Tests
==========================

End-to-end tests for the Emulator orchestrator: configuration, program
loading from files, headless runs, pause and single-step control, keypad
input and display output.
"""

import dataclasses
import logging
from pathlib import Path

import pytest
from chip8_vm.cpu import MAX_PROGRAM_SIZE
from chip8_vm.emulator import Emulator, EmulatorConfig, KeyboardLayout
from chip8_vm.errors import DecodeError, RomLoadError


def program(*words: int) -> bytes:
    return b"".join(word.to_bytes(2, "big") for word in words)


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


# Draw glyph 5 at (0, 0), then spin
DRAW_FIVE = program(0x6005, 0xF029, 0x6100, 0x6200, 0xD125, 0x120A)

# Wait for a key into V0, then spin
WAIT_KEY = program(0xF00A, 0x1202)


@pytest.fixture
def rom_file(tmp_path) -> Path:
    path = tmp_path / "five.ch8"
    path.write_bytes(DRAW_FIVE)
    return path


# =============================================================================
# Configuration
# =============================================================================

class TestEmulatorConfig:
    def test_defaults(self):
        config = EmulatorConfig()
        assert config.rom_path is None
        assert config.scale == 1
        assert config.clock_speed == 500
        assert config.layout == KeyboardLayout.QWERTY
        assert config.seed is None

    @pytest.mark.parametrize("kwargs", [{"scale": 0}, {"clock_speed": 0}, {"clock_speed": -1}])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            EmulatorConfig(**kwargs)

    def test_frozen(self):
        config = EmulatorConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.scale = 4

    def test_clock_speed_reaches_scheduler(self):
        emu = Emulator(EmulatorConfig(clock_speed=700))
        assert emu.scheduler.clock_speed == 700


# =============================================================================
# Program Loading
# =============================================================================

class TestLoadRom:
    def test_load_from_config(self, rom_file):
        emu = Emulator(EmulatorConfig(rom_path=rom_file))
        assert emu.program_size == len(DRAW_FIVE)
        assert emu.memory.dump(0x200, len(DRAW_FIVE)) == DRAW_FIVE

    def test_load_rom_returns_size(self, rom_file):
        emu = Emulator()
        assert emu.load_rom(rom_file) == len(DRAW_FIVE)

    def test_missing_file(self, tmp_path):
        with pytest.raises(RomLoadError) as exc_info:
            Emulator(EmulatorConfig(rom_path=tmp_path / "nope.ch8"))
        assert "file not found" in str(exc_info.value)
        assert exc_info.value.path == tmp_path / "nope.ch8"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.ch8"
        path.write_bytes(b"")
        with pytest.raises(RomLoadError, match="empty"):
            Emulator().load_rom(path)

    def test_directory(self, tmp_path):
        with pytest.raises(RomLoadError):
            Emulator().load_rom(tmp_path)

    def test_truncation_warns(self, tmp_path, caplog):
        path = tmp_path / "big.ch8"
        path.write_bytes(bytes(MAX_PROGRAM_SIZE + 1))
        with caplog.at_level(logging.WARNING, logger="chip8_vm.emulator.emulator"):
            assert Emulator().load_rom(path) == MAX_PROGRAM_SIZE
        assert "truncated" in caplog.text

    def test_debug_log_lists_first_opcodes(self, rom_file, caplog):
        with caplog.at_level(logging.DEBUG, logger="chip8_vm.emulator.emulator"):
            Emulator().load_rom(rom_file)
        assert "five.ch8" in caplog.text
        assert f"Read {len(DRAW_FIVE)} bytes" in caplog.text
        assert "DRW V1, V2, 5" in caplog.text

    def test_load_bytes_empty(self):
        with pytest.raises(ValueError):
            Emulator().load_bytes(b"")


# =============================================================================
# Execution
# =============================================================================

class TestExecution:
    def test_run_draws_glyph(self):
        emu = Emulator()
        emu.load_bytes(DRAW_FIVE)
        assert emu.run(20) == 20
        lines = emu.display_text.splitlines()
        assert lines[0].startswith("####.")
        assert lines[1].startswith("#....")
        assert emu.cpu.pc == 0x20A

    def test_step_returns_instruction(self):
        emu = Emulator()
        emu.load_bytes(DRAW_FIVE)
        ins = emu.step()
        assert ins.word == 0x6005
        assert emu.cpu.v[0] == 5

    def test_step_presents_frame(self):
        frames = []
        emu = Emulator()
        emu.display_sink = frames.append
        emu.load_bytes(DRAW_FIVE)
        for _ in range(4):
            emu.step()
        assert frames == []
        emu.step()
        assert len(frames) == 1

    def test_reset_reloads_program(self):
        emu = Emulator()
        emu.load_bytes(DRAW_FIVE)
        emu.run(10)
        emu.memory.write(0x200, 0xFF)
        emu.reset()
        assert emu.cpu.pc == 0x200
        assert emu.framebuffer.lit_count == 0
        assert emu.memory.dump(0x200, len(DRAW_FIVE)) == DRAW_FIVE
        emu.run(10)
        assert emu.framebuffer.lit_count > 0

    def test_decode_error_halts(self):
        emu = Emulator()
        emu.load_bytes(program(0x6001, 0x5123))
        with pytest.raises(DecodeError) as exc_info:
            emu.run(10)
        assert exc_info.value.pc == 0x202
        assert emu.halted
        assert emu.run(10) == 0

    def test_seed_makes_random_reproducible(self):
        results = []
        for _ in range(2):
            emu = Emulator(EmulatorConfig(seed=7))
            emu.load_bytes(program(0xC0FF, 0xC1FF, 0x1204))
            emu.run(3)
            results.append(tuple(emu.cpu.v[:2]))
        assert results[0] == results[1]

    def test_tick_paces_against_clock(self):
        clock = FakeClock()
        emu = Emulator(EmulatorConfig(clock_speed=500), clock=clock)
        emu.load_bytes(DRAW_FIVE)
        assert emu.tick() == 0
        clock.now = 0.01
        assert emu.tick() == 5


# =============================================================================
# Pause, Single Step and Quit
# =============================================================================

class TestPauseAndStep:
    @pytest.fixture
    def emu(self):
        emu = Emulator(EmulatorConfig(clock_speed=500))
        emu.load_bytes(DRAW_FIVE)
        return emu

    def test_paused_tick_does_nothing(self, emu):
        emu.tick(now=0.0)
        assert emu.toggle_pause(now=0.0) is True
        assert emu.tick(now=1.0) == 0
        assert emu.cpu.pc == 0x200

    def test_request_step(self, emu):
        emu.toggle_pause()
        emu.request_step()
        assert emu.tick() == 1
        assert emu.cpu.pc == 0x202
        assert emu.tick() == 0

    def test_request_step_ignored_when_running(self, emu):
        emu.request_step()
        assert not emu._step_requested

    def test_resume_does_not_replay_paused_time(self, emu):
        emu.tick(now=0.0)
        emu.toggle_pause(now=0.0)
        assert emu.toggle_pause(now=100.0) is False
        assert emu.tick(now=100.004) == 2

    def test_quit(self, emu):
        emu.quit()
        assert emu.halted
        assert emu.tick(now=5.0) == 0


# =============================================================================
# Keypad Input
# =============================================================================

class TestKeypadInput:
    def test_wait_for_key(self):
        emu = Emulator()
        emu.load_bytes(WAIT_KEY)
        emu.run(10)
        assert emu.cpu.pc == 0x200
        assert emu.cpu.waiting_for_key
        emu.press_key(0x7)
        emu.run(1)
        assert emu.cpu.v[0] == 0x7
        assert emu.cpu.pc == 0x202

    def test_set_keys(self):
        emu = Emulator()
        emu.set_keys([False] * 3 + [True] + [False] * 12)
        assert emu.keypad.pressed_keys() == [3]
        emu.release_key(3)
        assert emu.keypad.pressed_keys() == []


# =============================================================================
# Timers
# =============================================================================

class TestTimersEndToEnd:
    def test_delay_loop(self):
        """Set DT=30 and spin until it reads zero: takes half a second."""
        emu = Emulator(EmulatorConfig(clock_speed=600))
        # 200: LD V0, 30   202: LD DT, V0   204: LD V1, DT   206: SE V1, 0
        # 208: JP 204      20A: JP 20A
        emu.load_bytes(program(0x601E, 0xF015, 0xF107, 0x3100, 0x1204, 0x120A))
        emu.run(600)
        assert emu.cpu.pc == 0x20A
        assert emu.cpu.delay_timer == 0
