"""
CHIP-8 CPU
==========

Machine state and instruction executor for the CHIP-8 VM.

Registers:
- V0-VF: 8-bit general purpose registers (VF doubles as carry/borrow/collision flag)
- I: 16-bit index register, base address for sprite, BCD and block operations
- PC: 12-bit program counter, starts at $200
- Stack: up to 16 return addresses
- Delay and sound timers: 8-bit, decremented at 60 Hz down to 0

Instructions are decoded by chip8_vm.cpu.decode. Each instruction runs as
one atomic step and then advances PC by 2, unless it jumps, calls or
returns, skips (PC += 4), or blocks waiting for a key (PC unchanged).

Flag behaviour follows Cowgod's reference: VF = 1 means carry for 8xy4 and
"no borrow" for 8xy5 / 8xy7. Shifts operate on Vx. When an 8xy_ operation
targets VF itself, the flag is written last and wins.

Copyright (c) 2025 CHIP-8 VM Contributors
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..cpu import ADDRESS_MASK, INSTRUCTION_SIZE, PROGRAM_START, Instruction, decode
from ..errors import (
    DecodeError,
    MachineError,
    MachineHaltedError,
    StackOverflowError,
    StackUnderflowError,
)
from .display import Framebuffer
from .keyboard import Keypad
from .memory import Memory, font_address

logger = logging.getLogger(__name__)


NUM_REGISTERS = 16
STACK_DEPTH = 16


# =============================================================================
# Machine State
# =============================================================================

@dataclass
class CPUState:
    """
    Complete register state of the CPU.

    All values stored as Python ints but represent:
    - v: sixteen 8-bit registers
    - i: 16-bit index
    - pc: 12-bit program counter
    - stack: return addresses, innermost call last
    - delay_timer, sound_timer: 8-bit countdowns
    """
    v: List[int] = field(default_factory=lambda: [0] * NUM_REGISTERS)
    i: int = 0
    pc: int = PROGRAM_START
    stack: List[int] = field(default_factory=list)
    delay_timer: int = 0
    sound_timer: int = 0
    waiting_for_key: bool = False
    halted: bool = False


# =============================================================================
# Executor
# =============================================================================

class Chip8CPU:
    """
    CHIP-8 interpreter core.

    The CPU owns its register state and is handed the memory, framebuffer
    and keypad it operates on; there is no module-level state.

    Instrumentation hook:
        on_instruction(pc, instruction) is called before each instruction
        executes, for tracing.

    Example:
        >>> cpu = Chip8CPU(Memory(), Framebuffer(), Keypad())
        >>> cpu.memory.load_program(bytes([0x60, 0x2A]))  # LD V0, $2A
        2
        >>> cpu.step()
        Instruction(op=6, x=0, y=2, n=10)
        >>> cpu.v[0], f"{cpu.pc:03X}"
        (42, '202')
    """

    def __init__(
        self,
        memory: Memory,
        framebuffer: Framebuffer,
        keypad: Keypad,
        rng: Optional[random.Random] = None,
    ):
        self.memory = memory
        self.framebuffer = framebuffer
        self.keypad = keypad
        self.rng = rng or random.Random()
        self.state = CPUState()

        # on_instruction(pc, instruction): called before execution
        self.on_instruction: Optional[Callable[[int, Instruction], None]] = None

    # ========================================
    # Register Properties
    # ========================================

    @property
    def v(self) -> List[int]:
        """General purpose registers V0-VF."""
        return self.state.v

    @property
    def i(self) -> int:
        """Index register (16-bit)."""
        return self.state.i

    @i.setter
    def i(self, value: int) -> None:
        self.state.i = value & 0xFFFF

    @property
    def pc(self) -> int:
        """Program counter (12-bit)."""
        return self.state.pc

    @pc.setter
    def pc(self, value: int) -> None:
        self.state.pc = value & ADDRESS_MASK

    @property
    def sp(self) -> int:
        """Stack pointer (number of return addresses on the stack)."""
        return len(self.state.stack)

    @property
    def stack(self) -> List[int]:
        return self.state.stack

    @property
    def delay_timer(self) -> int:
        return self.state.delay_timer

    @delay_timer.setter
    def delay_timer(self, value: int) -> None:
        self.state.delay_timer = value & 0xFF

    @property
    def sound_timer(self) -> int:
        return self.state.sound_timer

    @sound_timer.setter
    def sound_timer(self, value: int) -> None:
        self.state.sound_timer = value & 0xFF

    @property
    def sound_active(self) -> bool:
        """True while the sound timer is counting down."""
        return self.state.sound_timer > 0

    @property
    def halted(self) -> bool:
        return self.state.halted

    @property
    def waiting_for_key(self) -> bool:
        """True while an Fx0A instruction is blocking for input."""
        return self.state.waiting_for_key

    # ========================================
    # Control
    # ========================================

    def reset(self) -> None:
        """Clear all registers, stack and timers; PC back to $200."""
        self.state = CPUState()

    def halt(self) -> None:
        """Stop the machine after the current instruction."""
        self.state.halted = True

    def tick_timers(self) -> None:
        """Apply one 60 Hz timer tick to both timers."""
        if self.state.delay_timer > 0:
            self.state.delay_timer -= 1
        if self.state.sound_timer > 0:
            self.state.sound_timer -= 1

    def fetch(self) -> Instruction:
        """Decode the instruction at PC without executing it."""
        return decode(self.memory.read(self.pc), self.memory.read(self.pc + 1))

    def step(self) -> Instruction:
        """
        Fetch, decode and execute exactly one instruction.

        Returns:
            The executed instruction

        Raises:
            MachineHaltedError: If the machine has already halted
            DecodeError: If the word at PC is not a valid instruction
            StackOverflowError, StackUnderflowError: On call/return faults
        """
        pc = self.pc
        if self.state.halted:
            raise MachineHaltedError(pc)

        instruction = self.fetch()
        if self.on_instruction:
            self.on_instruction(pc, instruction)

        try:
            self.pc = self._execute(instruction, pc)
        except MachineError as e:
            self.state.halted = True
            logger.debug(f"Machine halted: {e}")
            raise
        return instruction

    def format_state(self) -> str:
        """One-line register dump for logs and error reports."""
        regs = " ".join(f"V{idx:X}={value:02X}" for idx, value in enumerate(self.v))
        return (
            f"PC=${self.pc:03X} I=${self.i:04X} SP={self.sp} "
            f"DT={self.delay_timer} ST={self.sound_timer} {regs}"
        )

    # ========================================
    # Stack Operations
    # ========================================

    def _push(self, address: int, pc: int) -> None:
        if len(self.state.stack) >= STACK_DEPTH:
            raise StackOverflowError(len(self.state.stack), pc)
        self.state.stack.append(address & ADDRESS_MASK)

    def _pop(self, pc: int) -> int:
        if not self.state.stack:
            raise StackUnderflowError(pc)
        return self.state.stack.pop()

    # ========================================
    # Instruction Execution
    # ========================================

    def _execute(self, ins: Instruction, pc: int) -> int:
        """
        Execute a single decoded instruction.

        Args:
            ins: The decoded instruction
            pc: Address the instruction was fetched from

        Returns:
            The new program counter
        """
        v = self.state.v
        next_pc = pc + INSTRUCTION_SIZE
        skip_pc = pc + 2 * INSTRUCTION_SIZE

        match (ins.op, ins.x, ins.y, ins.n):
            # ============================================
            # System and flow control
            # ============================================
            case (0x0, 0x0, 0xE, 0x0):  # CLS
                self.framebuffer.clear()
                return next_pc
            case (0x0, 0x0, 0xE, 0xE):  # RET
                return self._pop(pc)
            case (0x1, _, _, _):  # JP addr
                return ins.nnn
            case (0x2, _, _, _):  # CALL addr
                self._push(next_pc, pc)
                return ins.nnn
            case (0x3, x, _, _):  # SE Vx, byte
                return skip_pc if v[x] == ins.kk else next_pc
            case (0x4, x, _, _):  # SNE Vx, byte
                return skip_pc if v[x] != ins.kk else next_pc
            case (0x5, x, y, 0x0):  # SE Vx, Vy
                return skip_pc if v[x] == v[y] else next_pc
            case (0x6, x, _, _):  # LD Vx, byte
                v[x] = ins.kk
                return next_pc
            case (0x7, x, _, _):  # ADD Vx, byte
                v[x] = (v[x] + ins.kk) & 0xFF
                return next_pc

            # ============================================
            # Register arithmetic (8xy_)
            # ============================================
            case (0x8, x, y, 0x0):  # LD Vx, Vy
                v[x] = v[y]
                return next_pc
            case (0x8, x, y, 0x1):  # OR Vx, Vy
                v[x] |= v[y]
                return next_pc
            case (0x8, x, y, 0x2):  # AND Vx, Vy
                v[x] &= v[y]
                return next_pc
            case (0x8, x, y, 0x3):  # XOR Vx, Vy
                v[x] ^= v[y]
                return next_pc
            case (0x8, x, y, 0x4):  # ADD Vx, Vy
                total = v[x] + v[y]
                v[x] = total & 0xFF
                v[0xF] = 1 if total > 0xFF else 0
                return next_pc
            case (0x8, x, y, 0x5):  # SUB Vx, Vy
                no_borrow = v[x] >= v[y]
                v[x] = (v[x] - v[y]) & 0xFF
                v[0xF] = 1 if no_borrow else 0
                return next_pc
            case (0x8, x, _, 0x6):  # SHR Vx
                lsb = v[x] & 0x01
                v[x] >>= 1
                v[0xF] = lsb
                return next_pc
            case (0x8, x, y, 0x7):  # SUBN Vx, Vy
                no_borrow = v[y] >= v[x]
                v[x] = (v[y] - v[x]) & 0xFF
                v[0xF] = 1 if no_borrow else 0
                return next_pc
            case (0x8, x, _, 0xE):  # SHL Vx
                msb = (v[x] >> 7) & 0x01
                v[x] = (v[x] << 1) & 0xFF
                v[0xF] = msb
                return next_pc

            case (0x9, x, y, 0x0):  # SNE Vx, Vy
                return skip_pc if v[x] != v[y] else next_pc
            case (0xA, _, _, _):  # LD I, addr
                self.i = ins.nnn
                return next_pc
            case (0xB, _, _, _):  # JP V0, addr
                return v[0] + ins.nnn
            case (0xC, x, _, _):  # RND Vx, byte
                v[x] = self.rng.randrange(256) & ins.kk
                return next_pc
            case (0xD, x, y, n):  # DRW Vx, Vy, nibble
                rows = [self.memory.read(self.i + row) for row in range(n)]
                collision = self.framebuffer.draw_sprite(v[x], v[y], rows)
                v[0xF] = 1 if collision else 0
                return next_pc

            # ============================================
            # Keypad
            # ============================================
            case (0xE, x, 0x9, 0xE):  # SKP Vx
                return skip_pc if self.keypad.is_pressed(v[x] & 0xF) else next_pc
            case (0xE, x, 0xA, 0x1):  # SKNP Vx
                return skip_pc if not self.keypad.is_pressed(v[x] & 0xF) else next_pc

            # ============================================
            # Timers, index and memory (Fx__)
            # ============================================
            case (0xF, x, 0x0, 0x7):  # LD Vx, DT
                v[x] = self.state.delay_timer
                return next_pc
            case (0xF, x, 0x0, 0xA):  # LD Vx, K
                key = self.keypad.first_pressed()
                if key is None:
                    # Re-run this instruction next cycle
                    self.state.waiting_for_key = True
                    return pc
                self.state.waiting_for_key = False
                v[x] = key
                return next_pc
            case (0xF, x, 0x1, 0x5):  # LD DT, Vx
                self.delay_timer = v[x]
                return next_pc
            case (0xF, x, 0x1, 0x8):  # LD ST, Vx
                self.sound_timer = v[x]
                return next_pc
            case (0xF, x, 0x1, 0xE):  # ADD I, Vx
                self.i = self.i + v[x]
                return next_pc
            case (0xF, x, 0x2, 0x9):  # LD F, Vx
                self.i = font_address(v[x])
                return next_pc
            case (0xF, x, 0x3, 0x3):  # LD B, Vx
                value = v[x]
                self.memory.write(self.i, value // 100)
                self.memory.write(self.i + 1, (value // 10) % 10)
                self.memory.write(self.i + 2, value % 10)
                return next_pc
            case (0xF, x, 0x5, 0x5):  # LD [I], Vx
                for reg in range(x + 1):
                    self.memory.write(self.i + reg, v[reg])
                return next_pc
            case (0xF, x, 0x6, 0x5):  # LD Vx, [I]
                for reg in range(x + 1):
                    v[reg] = self.memory.read(self.i + reg)
                return next_pc

            case _:
                raise DecodeError(ins.word, pc)
