import array
import random

import pytest

import igs036
from igs036 import (
    FINAL_XOR, Igs036Decryptor, Igs036Error, KeyTableError, ROT_DIRECTION, ROT_ENABLING, TRIGGERS,
    bitswap, deobfuscate, obfuscate, rol16, ror16, rotation, unbitswap,
)

ZERO_KEY = [0] * 0x100
FULL_KEY = [0xFFFF] * 0x100


def sample_addresses(count=200, seed=0x036):
    rng = random.Random(seed)
    return [0, 1, 0xFF, 0x100, 0x8008, 0xFFFFFF] + [rng.randrange(1 << 24) for _ in range(count)]


def test_table_shapes():
    assert len(TRIGGERS) == 16
    assert len(ROT_ENABLING) == 16
    assert all(len(row) == 4 for row in ROT_ENABLING)
    assert len(ROT_DIRECTION) == 4
    assert all(len(row) == 8 for row in ROT_DIRECTION)


def test_unverified_enable_rows_stay_constant_zero():
    for row in ROT_ENABLING[14:]:
        assert all(func is igs036.unknown for func in row)
    assert all(igs036.unknown(address) == 0 for address in range(0x100))


def test_boolean_functions():
    # bit 3 set, bit 4 clear, bit 7 set
    address = 0x88
    assert igs036.bit_3(address) == 1
    assert igs036.not_4(address) == 1
    assert igs036.xor_37(address) == 0
    assert igs036.xnor_37(address) == 1
    assert igs036.xor_47(address) == 1
    assert igs036.nor_34(address) == 0
    assert igs036.impl_43(address) == 1
    assert igs036.impl_43(0x10) == 0


def test_rol16():
    assert rol16(0x1234, 0) == 0x1234
    assert rol16(0x8001, 1) == 0x0003
    assert rol16(0x0001, 15) == 0x8000
    assert ror16(rol16(0xBEEF, 5), 5) == 0xBEEF
    assert ror16(0xBEEF, 0) == 0xBEEF


def test_bitswap_moves_single_bits():
    # output bit 15 <- input bit 10, output bit 0 <- input bit 1
    assert bitswap(1 << 10) == 1 << 15
    assert bitswap(1 << 1) == 1 << 0
    assert bitswap(1 << 14) == 1 << 7
    assert bitswap(0xFFFF) == 0xFFFF
    assert all(unbitswap(bitswap(1 << n)) == 1 << n for n in range(16))


def test_rotation_of_low_addresses():
    assert rotation(0) == 0
    assert rotation(1) == 14
    assert rotation(2) == 2
    assert rotation(3) == 4


def test_rotation_weight9_group_inverts_others():
    # bit 15 enables the weight-9 group, which then enables the other three
    assert rotation(0x8008) == 6


def test_rotation_range():
    assert all(0 <= rotation(address) <= 15 for address in sample_addresses(2000))


def test_deobfuscate_known_values():
    assert deobfuscate(0x0000, 0) == 0x0000
    assert deobfuscate(0xFFFF, 0) == 0xFFFF
    assert deobfuscate(0x0001, 1) == 0x0080


@pytest.mark.parametrize("address", [1, 0x8008])
def test_deobfuscate_is_a_bijection(address):
    outputs = {deobfuscate(word, address) for word in range(0x10000)}
    assert len(outputs) == 0x10000


def test_obfuscate_inverts_deobfuscate():
    rng = random.Random(1)
    for address in sample_addresses():
        word = rng.randrange(0x10000)
        assert obfuscate(deobfuscate(word, address), address) == word


def test_decrypt_word_scenarios():
    decryptor = Igs036Decryptor(ZERO_KEY)
    assert decryptor.decrypt_word(0x0000, 0) == 0x1A3A
    assert decryptor.decrypt_word(0xFFFF, 0) == 0xE5C5
    assert decryptor.decrypt_word(0x0001, 1) == 0x0080 ^ FINAL_XOR


def test_zero_key_entry_is_deobfuscation_only():
    key = list(FULL_KEY)
    key[0x42] = 0
    decryptor = Igs036Decryptor(key)
    rng = random.Random(2)
    for high in range(0, 0x10000, 0x111):
        address = (high << 8) | 0x42
        word = rng.randrange(0x10000)
        assert decryptor.decrypt_word(word, address) == deobfuscate(word, address) ^ FINAL_XOR


def test_xor_mask_follows_triggers():
    decryptor = Igs036Decryptor(FULL_KEY)
    assert decryptor.xor_mask(0x000000) == 0x4875
    assert decryptor.xor_mask(0x000100) == 0x4974
    assert decryptor.decrypt_word(0x0000, 0) == 0x4875 ^ FINAL_XOR


def test_xor_mask_needs_key_bit():
    key = list(ZERO_KEY)
    key[1] = 0x0001
    decryptor = Igs036Decryptor(key)
    # bit 0 fires when high address bit 0 is clear
    assert decryptor.xor_mask(0x000001) == 0x0001
    assert decryptor.xor_mask(0x000101) == 0x0000
    # other low bytes see a zero key entry
    assert decryptor.xor_mask(0x000002) == 0x0000


def test_apply_key_xor_is_self_inverse():
    decryptor = Igs036Decryptor(FULL_KEY)
    for address in sample_addresses():
        assert decryptor.apply_key_xor(decryptor.apply_key_xor(0x1234, address), address) == 0x1234


def test_decrypt_word_is_deterministic():
    decryptor = Igs036Decryptor(FULL_KEY)
    for address in sample_addresses(50):
        assert decryptor.decrypt_word(0xA5A5, address) == decryptor.decrypt_word(0xA5A5, address)


def test_encrypt_word_inverts_decrypt_word():
    rng = random.Random(3)
    key = [rng.randrange(0x10000) for _ in range(0x100)]
    decryptor = Igs036Decryptor(key)
    for address in sample_addresses():
        word = rng.randrange(0x10000)
        assert decryptor.encrypt_word(decryptor.decrypt_word(word, address), address) == word
        assert decryptor.decrypt_word(decryptor.encrypt_word(word, address), address) == word


def test_decrypt_region_matches_per_word():
    rng = random.Random(4)
    key = [rng.randrange(0x10000) for _ in range(0x100)]
    decryptor = Igs036Decryptor(key)

    original = [rng.randrange(0x10000) for _ in range(0x300)]
    buffer = array.array('H', original)
    decryptor.decrypt_region(buffer, len(buffer))

    assert list(buffer) == [decryptor.decrypt_word(w, i) for i, w in enumerate(original)]


def test_decrypt_region_count_limits_pass():
    decryptor = Igs036Decryptor(ZERO_KEY)
    buffer = [0] * 8
    decryptor.decrypt_region(buffer, 4)
    assert buffer[:4] == [decryptor.decrypt_word(0, i) for i in range(4)]
    assert buffer[4:] == [0] * 4


def test_encrypt_region_restores_buffer():
    decryptor = Igs036Decryptor(FULL_KEY)
    original = list(range(0, 0x10000, 0x101))
    buffer = array.array('H', original)
    decryptor.decrypt_region(buffer)
    assert list(buffer) != original
    decryptor.encrypt_region(buffer)
    assert list(buffer) == original


def test_key_is_not_mutated():
    key = list(FULL_KEY)
    decryptor = Igs036Decryptor(key)
    decryptor.decrypt_region([0] * 16)
    assert key == FULL_KEY
    assert decryptor.key == tuple(FULL_KEY)


@pytest.mark.parametrize("key", [
    [0] * 0xFF,
    [0] * 0x101,
    [0] * 0xFF + [0x10000],
    [0] * 0xFF + [-1],
    [0] * 0xFF + ["0x10"],
    None,
])
def test_bad_key_rejected(key):
    with pytest.raises(KeyTableError):
        Igs036Decryptor(key)


@pytest.mark.parametrize("count", [9, -1])
def test_region_count_out_of_range_leaves_buffer_untouched(count):
    decryptor = Igs036Decryptor(FULL_KEY)
    buffer = array.array('H', range(8))
    for transform in (decryptor.decrypt_region, decryptor.encrypt_region):
        with pytest.raises(Igs036Error):
            transform(buffer, count)
        assert list(buffer) == list(range(8))
