#Re-encrypts a decrypted (and possibly patched) IGS036 program ROM.

import argparse
import sys
from pathlib import Path

from DecRom import add_key_arguments, list_keys, select_key
from igs036 import Igs036Decryptor, Igs036Error
from romio import load_rom, save_rom


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Encrypt an IGS036 program ROM')
    parser.add_argument('rom', type=Path, nargs='?', help='Decrypted ROM image')
    parser.add_argument('output', type=Path, nargs='?', help='Encrypted ROM image to write')
    add_key_arguments(parser)
    args = parser.parse_args(argv)

    if args.list:
        list_keys()
        return 0

    if args.rom is None or args.output is None:
        parser.error("rom and output are required")

    try:
        entry = select_key(parser, args)
        words = load_rom(args.rom)

        Igs036Decryptor(entry.key).encrypt_region(words)
        save_rom(args.output, words)
        print(f"Encrypted {len(words)} words with key '{entry.name}' -> {args.output}")

    except (Igs036Error, OSError) as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
