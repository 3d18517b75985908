#!/usr/bin/env python3
import argparse
import sys
from typing import List, Optional

from brutus import (HexError, ScoredCandidate, break_single_xor, break_single_xor_parallel, decode_hexbytes,
                    rank_keys, single_byte_xor, strip_trailing_whitespace)

"""
Single-byte XOR cipher

The hex encoded string:

1b37373331363f78151b7f2b783431333d78397828372d363c78373e783a393b3736

... has been XOR'd against a single character. Find the key, decrypt the message.

You can do this by hand. But don't: write code to do it for you.

How? Devise some method for "scoring" a piece of English plaintext. Character frequency is a good metric.
Evaluate each output and choose the one with the best score.
"""


def format_key(key: int) -> str:
    """
    >>> format_key(0x42)
    '0x42 (B)'
    >>> format_key(0x0a)
    '0x0a'
    """
    c = chr(key)
    if key < 0x80 and c.isprintable():
        return f"{key:#04x} ({c})"
    return f"{key:#04x}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brutus",
        description="Recover the key of a single-byte XOR ciphertext stored as hex in a file.",
    )
    parser.add_argument("file", help="file containing the hex encoded ciphertext")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-s", "--single", action="store_true", help="use a single-threaded cracker (default)")
    mode.add_argument("-t", "--threaded", action="store_true", help="use a multi-threaded cracker")

    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=2,
        help="number of worker threads for --threaded (default: 2)",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=0,
        metavar="N",
        help="also print the N best scoring keys",
    )
    parser.add_argument(
        "--keep-whitespace",
        action="store_true",
        help="don't strip trailing whitespace (e.g. a newline) before decoding",
    )
    return parser


def read_ciphertext(path: str, keep_whitespace: bool = False) -> bytes:
    with open(path, "rb") as f:
        hexbytes = f.read()
    if not keep_whitespace:
        hexbytes = strip_trailing_whitespace(hexbytes)
    return decode_hexbytes(hexbytes)


def crack(ciphertext: bytes, threaded: bool = False, workers: int = 2) -> ScoredCandidate:
    if threaded:
        return break_single_xor_parallel(ciphertext, workers=workers)
    return break_single_xor(ciphertext)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.workers < 1:
        parser.error(f"--workers must be at least 1, got {args.workers}")
    if args.top < 0:
        parser.error(f"--top must not be negative, got {args.top}")

    try:
        ciphertext = read_ciphertext(args.file, keep_whitespace=args.keep_whitespace)
    except OSError as exc:
        print(f"error: could not read {args.file}: {exc.strerror or exc}", file=sys.stderr)
        return 1
    except HexError as exc:
        print(f"error: {args.file} is not valid hex: {exc}", file=sys.stderr)
        return 1

    if not ciphertext:
        print(f"error: {args.file} contains no ciphertext", file=sys.stderr)
        return 1

    result = crack(ciphertext, threaded=args.threaded, workers=args.workers)

    print(f"Final key: {format_key(result.key)}")
    print(f"Score: {result.score:.2f}")
    print(f"Plaintext: {single_byte_xor(ciphertext, result.key)!r}")

    if args.top:
        print()
        print(f"Top {args.top} results")
        for candidate in rank_keys(ciphertext)[:args.top]:
            print(f"{format_key(candidate.key)}\t{candidate.score:.2f}\t{single_byte_xor(ciphertext, candidate.key)!r}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
