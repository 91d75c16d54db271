#IGS036 program ROM decryption
#
# Words are 16 bits wide and addresses are word addresses (byte address / 2).
# The low 8 bits of an address select a key entry and drive the boolean
# functions below; the high 16 bits drive the rotation groups and the XOR
# triggers.
from typing import Callable, MutableSequence, Optional, Sequence, Tuple

KEY_SIZE = 0x100
FINAL_XOR = 0x1A3A

# (mask, match) over the high address bits, one per XOR bit
# (the one at index #10 is a guess; it is not observed in any game)
TRIGGERS: Tuple[Tuple[int, int], ...] = (
    (0x0001, 0x0000), (0x0008, 0x0008), (0x0002, 0x0000), (0x0004, 0x0004),
    (0x0100, 0x0000), (0x0200, 0x0000), (0x0400, 0x0000), (0x0800, 0x0800),
    (0x1001, 0x0001), (0x2002, 0x2000), (0x4004, 0x4000), (0x8008, 0x0000),
    (0x0010, 0x0010), (0x0020, 0x0020), (0x0040, 0x0000), (0x0081, 0x0081),
)

# output bit 15..0 <- input bit
BITSWAP = (10, 9, 8, 7, 0, 15, 6, 5, 14, 13, 4, 3, 12, 11, 2, 1)

# High address bit groups, highest first, with their rotation weight
GROUPS: Tuple[Tuple[Tuple[int, int, int, int], int], ...] = (
    ((15, 11, 7, 5), 9),
    ((14, 9, 3, 2), 1),
    ((13, 10, 6, 1), 2),
    ((12, 8, 4, 0), 4),
)


class Igs036Error(Exception):
    pass


class KeyTableError(Igs036Error):
    pass


def bit(value: int, n: int) -> int:
    return (value >> n) & 1


# Boolean functions of the low address bits. Only bits 0-4 and 7 matter;
# bits 5 and 6 are never consulted.

def unknown(address: int) -> int:
    # placeholder for table entries never seen active
    return 0

def zero(address: int) -> int:
    return 0

def one(address: int) -> int:
    return 1

def bit_3(address: int) -> int:
    return bit(address, 3)

def bit_4(address: int) -> int:
    return bit(address, 4)

def bit_7(address: int) -> int:
    return bit(address, 7)

def not_3(address: int) -> int:
    return bit(address, 3) ^ 1

def not_4(address: int) -> int:
    return bit(address, 4) ^ 1

def not_7(address: int) -> int:
    return bit(address, 7) ^ 1

def xor_37(address: int) -> int:
    return bit(address, 3) ^ bit(address, 7)

def xnor_37(address: int) -> int:
    return bit(address, 3) ^ bit(address, 7) ^ 1

def xor_47(address: int) -> int:
    return bit(address, 4) ^ bit(address, 7)

def xnor_47(address: int) -> int:
    return bit(address, 4) ^ bit(address, 7) ^ 1

def nor_34(address: int) -> int:
    return (bit(address, 3) | bit(address, 4)) ^ 1

def impl_43(address: int) -> int:
    return bit(address, 3) | (bit(address, 4) ^ 1)


BoolFunc = Callable[[int], int]

# Indexed by high address bit position, then by (probe & 3).
# Rows 14 and 15 have never been seen triggering; they stay `unknown`.
ROT_ENABLING: Tuple[Tuple[BoolFunc, ...], ...] = (
    (bit_3,   not_3,   bit_3,   not_3),
    (bit_3,   not_3,   bit_3,   not_3),
    (bit_4,   bit_4,   bit_4,   bit_4),
    (bit_4,   not_4,   bit_4,   not_4),
    (bit_3,   bit_3,   bit_3,   bit_3),
    (nor_34,  bit_7,   bit_7,   zero),
    (zero,    one,     zero,    one),
    (impl_43, xor_37,  xnor_37, not_3),
    (bit_3,   bit_3,   not_3,   not_3),
    (bit_4,   bit_4,   not_4,   not_4),
    (zero,    zero,    zero,    zero),
    (nor_34,  bit_7,   not_7,   one),
    (bit_3,   not_3,   bit_3,   not_3),
    (zero,    one,     one,     zero),
    (unknown, unknown, unknown, unknown),
    (unknown, unknown, unknown, unknown),
)

# Indexed by (first group bit & 3), then by (address & 7)
ROT_DIRECTION: Tuple[Tuple[BoolFunc, ...], ...] = (
    (bit_3, xor_37, xnor_37, not_3, bit_3, xor_37, xnor_37, not_3),
    (zero,  not_7,  not_7,   zero,  zero,  not_7,  not_7,   zero),
    (bit_4, xor_47, xnor_47, not_4, bit_4, xor_47, xnor_47, not_4),
    (bit_3, not_7,  bit_7,   zero,  one,   not_7,  bit_7,   zero),
)


def rol16(value: int, shift: int) -> int:
    shift &= 0xF
    if shift == 0:
        return value & 0xFFFF
    return ((value << shift) | (value >> (16 - shift))) & 0xFFFF


def ror16(value: int, shift: int) -> int:
    return rol16(value, 16 - (shift & 0xF))


def bitswap(value: int) -> int:
    result = 0
    for out_bit, in_bit in enumerate(reversed(BITSWAP)):
        result |= bit(value, in_bit) << out_bit
    return result


def unbitswap(value: int) -> int:
    result = 0
    for out_bit, in_bit in enumerate(reversed(BITSWAP)):
        result |= bit(value, out_bit) << in_bit
    return result


def rot_enabled(address: int, group: Sequence[int]) -> int:
    """Enable state of a rotation group, decided by its highest set bit."""
    for pos in group:
        if bit(address, 8 + pos):
            probe = address ^ (0x1B * bit(address, 2))
            return ROT_ENABLING[pos][probe & 3](probe)
    return 0


def rot_group(address: int, group: Sequence[int]) -> int:
    """Rotation direction of a group: +1 or -1."""
    return ROT_DIRECTION[group[0] & 3][address & 7](address) * 2 - 1


def rotation(address: int) -> int:
    """Left rotation (0-15) applied to the word stored at `address`."""
    (group0, weight0), *others = GROUPS

    # rotation depending on the high address bits; the weight-9 group
    # inverts the enable state of the others when it is active
    enabled0 = rot_enabled(address, group0)
    rot = enabled0 * rot_group(address, group0) * weight0
    for group, weight in others:
        enabled = enabled0 ^ rot_enabled(address, group)
        rot += enabled * rot_group(address, group) * weight

    # block rotation, depending on the low bits only
    b0, b1, b3, b4, b7 = (bit(address, n) for n in (0, 1, 3, 4, 7))
    rot2 = 4 * b0
    rot2 += 1 * b4 * (b0 * 2 - 1)
    rot2 += 4 * b3 * (b0 * 2 - 1)
    rot2 *= (b7 | (b0 ^ b1 ^ 1)) * 2 - 1
    rot2 += 2 * ((b0 ^ b1) & (b7 ^ 1))

    return (rot + rot2) & 0xF


def deobfuscate(cipherword: int, address: int) -> int:
    """Key-independent half of the decryption."""
    return bitswap(rol16(cipherword, rotation(address)))


def obfuscate(word: int, address: int) -> int:
    """Inverse of deobfuscate() for the same address."""
    return ror16(unbitswap(word), rotation(address))


def validate_key(key: Sequence[int]) -> Tuple[int, ...]:
    try:
        values = tuple(key)
    except TypeError:
        raise KeyTableError(f"Key table must be a sequence, got {type(key).__name__}")

    if len(values) != KEY_SIZE:
        raise KeyTableError(f"Key table must have {KEY_SIZE} entries, got {len(values)}")

    for i, value in enumerate(values):
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFFFF:
            raise KeyTableError(f"Key entry {i:#04x} is not a 16-bit value: {value!r}")

    return values


class Igs036Decryptor:
    def __init__(self, key: Sequence[int]):
        self.key = validate_key(key)

    def xor_mask(self, address: int) -> int:
        """Bits toggled by the key-dependent layer at `address`."""
        key = self.key[address & 0xFF]
        high = address >> 8
        mask = 0
        for i, (trigger_mask, trigger_match) in enumerate(TRIGGERS):
            if bit(key, i) and (high & trigger_mask) == trigger_match:
                mask |= 1 << i
        return mask

    def apply_key_xor(self, value: int, address: int) -> int:
        return value ^ self.xor_mask(address)

    def decrypt_word(self, cipherword: int, address: int) -> int:
        aux = deobfuscate(cipherword, address)
        aux = self.apply_key_xor(aux, address)
        return aux ^ FINAL_XOR

    def encrypt_word(self, word: int, address: int) -> int:
        aux = self.apply_key_xor(word ^ FINAL_XOR, address)
        return obfuscate(aux, address)

    def _region_count(self, buffer: MutableSequence[int], count: Optional[int]) -> int:
        # checked before any word is touched
        if count is None:
            return len(buffer)
        if not 0 <= count <= len(buffer):
            raise Igs036Error(f"Word count {count} out of range for a buffer of {len(buffer)} words")
        return count

    def decrypt_region(self, buffer: MutableSequence[int], count: Optional[int] = None) -> None:
        for i in range(self._region_count(buffer, count)):
            buffer[i] = self.decrypt_word(buffer[i], i)

    def encrypt_region(self, buffer: MutableSequence[int], count: Optional[int] = None) -> None:
        for i in range(self._region_count(buffer, count)):
            buffer[i] = self.encrypt_word(buffer[i], i)
