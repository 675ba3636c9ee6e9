"""
Framebuffer for the CHIP-8 VM
=============================

The CHIP-8 display is a 64 x 32 monochrome grid. Pixels are only ever
changed by two instructions:

- 00E0 clears every pixel
- Dxyn XORs an 8-pixel-wide, n-row sprite into the grid and reports
  whether any lit pixel was switched off (collision)

The framebuffer keeps a dirty flag so the host only presents frames that
actually changed. Hosts receive a read-only snapshot, never the live grid.

Copyright (c) 2025 CHIP-8 VM Contributors
"""

from typing import Optional, Sequence, Tuple


SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32

SPRITE_WIDTH = 8

Snapshot = Tuple[Tuple[bool, ...], ...]


class Framebuffer:
    """
    64 x 32 boolean pixel grid with XOR sprite drawing.

    Pixels are stored row-major: pixel (x, y) lives at index y * width + x.

    Example:
        >>> fb = Framebuffer()
        >>> fb.draw_sprite(0, 0, [0xF0])
        False
        >>> fb.get_pixel(3, 0), fb.get_pixel(4, 0)
        (True, False)
        >>> fb.draw_sprite(0, 0, [0xF0])  # XOR back off, collision reported
        True
    """

    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT):
        self.width = width
        self.height = height
        self._pixels = [False] * (width * height)

        # Set whenever pixels change, cleared by whoever presents the frame
        self.dirty = False

    def clear(self) -> None:
        """Switch every pixel off and mark the frame dirty."""
        self._pixels = [False] * (self.width * self.height)
        self.dirty = True

    def draw_sprite(self, x: int, y: int, rows: Sequence[int]) -> bool:
        """
        XOR a sprite into the grid.

        Each row byte is drawn MSB first. The start position wraps onto the
        screen and every sprite pixel wraps independently at the edges.

        Args:
            x: Column of the top-left sprite pixel
            y: Row of the top-left sprite pixel
            rows: Sprite bytes, one per row

        Returns:
            True if any lit pixel was switched off
        """
        x %= self.width
        y %= self.height
        collision = False

        for row_idx, row_data in enumerate(rows):
            py = (y + row_idx) % self.height
            base = py * self.width
            for bit_idx in range(SPRITE_WIDTH):
                if not (row_data >> (7 - bit_idx)) & 1:
                    continue
                index = base + (x + bit_idx) % self.width
                if self._pixels[index]:
                    collision = True
                self._pixels[index] = not self._pixels[index]

        self.dirty = True
        return collision

    def get_pixel(self, x: int, y: int) -> bool:
        """State of pixel (x, y); coordinates wrap."""
        return self._pixels[(y % self.height) * self.width + (x % self.width)]

    @property
    def lit_count(self) -> int:
        """Number of pixels currently on."""
        return sum(self._pixels)

    def snapshot(self) -> Snapshot:
        """Read-only copy of the grid as a tuple of rows."""
        return tuple(
            tuple(self._pixels[row * self.width:(row + 1) * self.width])
            for row in range(self.height)
        )

    def get_pixel_buffer(self, on: int = 255, off: int = 0) -> bytes:
        """
        Get the grid as one byte per pixel, row-major.

        Args:
            on: Byte value for lit pixels
            off: Byte value for dark pixels
        """
        return bytes(on if pixel else off for pixel in self._pixels)

    def render_text(self, on: str = "#", off: str = ".") -> str:
        """Render the grid as text, one line per row."""
        return "\n".join(
            "".join(on if pixel else off for pixel in row)
            for row in self.snapshot()
        )

    def render_image(self, scale: int = 4) -> Optional[bytes]:
        """
        Render the framebuffer as a PNG image (requires PIL).

        Args:
            scale: Pixel scale factor (default 4)

        Returns:
            PNG image bytes, or None if PIL not available
        """
        try:
            from PIL import Image
            import io
        except ImportError:
            return None

        img = Image.frombytes('L', (self.width, self.height), self.get_pixel_buffer())
        if scale > 1:
            img = img.resize((self.width * scale, self.height * scale), Image.Resampling.NEAREST)

        buffer = io.BytesIO()
        img.save(buffer, format='PNG')
        return buffer.getvalue()
