"""
Print the Huffman code table of a message

How to run:
  python show_codes.py message.txt
  echo "abracadabra" | python show_codes.py
  python show_codes.py --bytes --stats image.bin
"""

from __future__ import annotations

import argparse
import sys
from typing import Dict, List, Optional

import huffman as huff


_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t", "'": "\\'", "\\": "\\\\"}


def format_symbol(symbol) -> str:
    # byte values: ASCII printables as characters, everything else as \xNN
    if isinstance(symbol, int) and 0 <= symbol <= 255:
        if 0x20 <= symbol < 0x7F:
            symbol = chr(symbol)
        else:
            return _ESCAPES.get(chr(symbol), f"\\x{symbol:02x}")
    if isinstance(symbol, str) and len(symbol) == 1:
        if symbol in _ESCAPES:
            return _ESCAPES[symbol]
        if symbol.isprintable():
            return symbol
        return symbol.encode("unicode_escape").decode("ascii")
    return str(symbol)


def format_code_table(codes: Dict) -> List[str]:
    return [f"'{format_symbol(symbol)}' --> {codes[symbol]}" for symbol in sorted(codes)]


def read_message(source: str, as_bytes: bool, encoding: str):
    # newlines are kept as-is so '\r' is counted like any other symbol
    if source == "-":
        data = sys.stdin.buffer.read()
        return data if as_bytes else data.decode(encoding)
    if as_bytes:
        with open(source, "rb") as f:
            return f.read()
    with open(source, "r", encoding=encoding, newline="") as f:
        return f.read()


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Derive and print the Huffman code table of a message")
    ap.add_argument("source", nargs="?", default="-", help="Input file ('-' reads stdin)")
    ap.add_argument("--bytes", action="store_true", help="Treat the input as raw bytes instead of text")
    ap.add_argument("--encoding", type=str, default="utf-8", help="Text encoding of the input file")
    ap.add_argument("--one-bit-single", action="store_true",
                    help="Show codeword '0' instead of an empty codeword when there is only one distinct symbol")
    ap.add_argument("--stats", action="store_true", help="Also print encoded length and bits per symbol")
    args = ap.parse_args(argv)

    try:
        message = read_message(args.source, args.bytes, args.encoding)
    except (OSError, UnicodeDecodeError, LookupError) as e:
        print(f"error: cannot read {args.source}: {e}", file=sys.stderr)
        return 2

    frequency_table = huff.count_frequency(message)
    try:
        root = huff.build_tree(huff.build_forest(frequency_table))
    except huff.EmptyForestError:
        print("error: message is empty, there is nothing to encode", file=sys.stderr)
        return 1

    codes = huff.create_encoding_table(root)
    # Edge case of one unique symbol -> the tree is a lone leaf and its code is empty
    if args.one_bit_single and len(codes) == 1:
        codes = {symbol: "0" for symbol in codes}

    for line in format_code_table(codes):
        print(line)

    if args.stats:
        total_bits = huff.weighted_code_length(codes, frequency_table)
        print(f"Symbols: {len(message)} ({len(codes)} distinct)")
        print(f"Encoded length: {total_bits} bits")
        print(f"Average: {total_bits / len(message):.4f} bits/symbol")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
