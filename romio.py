#Loading and saving IGS036 program ROM images as 16-bit word buffers.

import array
import math
import sys
from pathlib import Path
from typing import Sequence, Union

from PIL import Image

from igs036 import Igs036Error

PREVIEW_WIDTH = 1024


class RomError(Igs036Error):
    pass


class PreviewError(RomError):
    pass


def check_preview_path(path: Union[str, Path]) -> None:
    """Fail early if Pillow cannot write an image with this file extension."""
    suffix = Path(path).suffix.lower()
    image_format = Image.registered_extensions().get(suffix)
    if image_format not in Image.SAVE:
        raise PreviewError(f"Unsupported preview image format: '{suffix or path}'")


def words_from_bytes(data: bytes) -> array.array:
    """Little-endian bytes -> array of 16-bit words."""
    if len(data) % 2:
        raise RomError(f"ROM size must be even, got {len(data)} bytes")

    words = array.array('H')
    words.frombytes(data)
    if sys.byteorder == 'big':
        words.byteswap()
    return words


def words_to_bytes(words: Sequence[int]) -> bytes:
    out = array.array('H', words)
    if sys.byteorder == 'big':
        out.byteswap()
    return out.tobytes()


def load_rom(path: Union[str, Path]) -> array.array:
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise RomError(f"Cannot read ROM {path}: {e}")
    return words_from_bytes(data)


def save_rom(path: Union[str, Path], words: Sequence[int]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(words_to_bytes(words))


def render_preview(words: Sequence[int], width: int = PREVIEW_WIDTH) -> Image.Image:
    """
    Draw the ROM bytes as an 8-bit grayscale image, `width` bytes per row.

    Encrypted or badly decrypted code looks like noise; correctly decrypted
    code shows tables, text and padding as visible structure.
    """
    if width <= 0:
        raise ValueError(f"Preview width must be positive, got {width}")

    data = words_to_bytes(words)
    height = max(1, math.ceil(len(data) / width))
    pixels = data.ljust(width * height, b'\0')
    return Image.frombytes('L', (width, height), pixels, 'raw', 'L')
