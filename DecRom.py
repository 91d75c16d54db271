#Decrypts IGS036 program ROM images.

import argparse
import sys
from pathlib import Path

from igs036 import Igs036Decryptor, Igs036Error
from igs036_keys import KEYS, KeyEntry, get_key, load_key_file
from romio import check_preview_path, load_rom, render_preview, save_rom


def add_key_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument('-g', '--game', help='Bundled key table to use (see --list)')
    group.add_argument('-k', '--key-file', type=Path, help='JSON key table file')
    parser.add_argument('--list', action='store_true', help='List bundled key tables and exit')


def list_keys() -> None:
    for name, entry in KEYS.items():
        print(f"{name:<10} {entry.status.value}")


def select_key(parser: argparse.ArgumentParser, args: argparse.Namespace) -> KeyEntry:
    if args.key_file is not None:
        entry = load_key_file(args.key_file)
    elif args.game is not None:
        entry = get_key(args.game)
    else:
        parser.error("one of --game or --key-file is required")

    if not entry.trusted:
        print(f"Warning: key table '{entry.name}' is marked {entry.status.value}; output may be wrong")
    return entry


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Decrypt an IGS036 program ROM')
    parser.add_argument('rom', type=Path, nargs='?', help='Encrypted ROM image')
    parser.add_argument('output', type=Path, nargs='?', help='Decrypted ROM image to write')
    parser.add_argument('--preview', type=Path, help='Also save a grayscale PNG of the decrypted ROM')
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

        if args.preview is not None:
            check_preview_path(args.preview)

        decryptor = Igs036Decryptor(entry.key)
        decryptor.decrypt_region(words)
        save_rom(args.output, words)
        print(f"Decrypted {len(words)} words with key '{entry.name}' -> {args.output}")

        if args.preview is not None:
            render_preview(words).save(args.preview)
            print(f"Saved preview: {args.preview}")

    except (Igs036Error, OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
