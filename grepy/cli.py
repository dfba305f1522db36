"""
Command line front end.

    grepy [-v] [-n NFA_FILE] [-d DFA_FILE] REGEX INPUT_FILE

Reads one candidate string per line from INPUT_FILE, takes the alphabet to be every
character in that file, writes the NFA and DFA as DOT files and prints whether each
line is accepted by REGEX.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .constants import APP_NAME, DEFAULT_DFA_FILE, DEFAULT_NFA_FILE, VERSION
from .dot_export import serialize
from .fsa_transformations import build_dfa
from .regex_conversions import alphabet_from_strings, build_nfa

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Convert a regex to an NFA and a DFA, and test input strings against it."
    )
    parser.add_argument('regex', help="Regex using '+' for union, '*' for Kleene star and () for grouping")
    parser.add_argument('input_file', type=Path, help="File with one input string per line")
    parser.add_argument('-v', '--verbose', action='store_true', help="Verbose mode")
    parser.add_argument('-n', '--nfa-file', type=Path, default=Path(DEFAULT_NFA_FILE),
                        help=f"The dot file to write the NFA to (default: {DEFAULT_NFA_FILE})")
    parser.add_argument('-d', '--dfa-file', type=Path, default=Path(DEFAULT_DFA_FILE),
                        help=f"The dot file to write the DFA to (default: {DEFAULT_DFA_FILE})")
    parser.add_argument('--version', action='version', version=f"{APP_NAME} {VERSION}")
    return parser


def read_input_strings(path: Path) -> List[str]:
    """One input string per line, line endings stripped."""
    return path.read_text(encoding='utf-8').splitlines()


def error(msg: str, return_code: int = EXIT_ERROR) -> int:
    print(msg, file=sys.stderr)
    return return_code


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(message)s'
    )
    logger.info("%s version: %s", APP_NAME, VERSION)

    try:
        input_strings = read_input_strings(args.input_file)
    except OSError as e:
        return error(f"Cannot read input file: {e}")
    alphabet = alphabet_from_strings(input_strings)

    logger.info("Creating NFA...")
    result = build_nfa(args.regex, alphabet)
    if not result.ok:
        return error(f"Error parsing regex: {result.error}")
    nfa = result.nfa

    logger.info("Creating DFA...")
    dfa = build_dfa(nfa, alphabet)

    logger.info("Writing NFA to %s and DFA to %s...", args.nfa_file, args.dfa_file)
    try:
        args.nfa_file.write_text(serialize(nfa), encoding='utf-8')
        args.dfa_file.write_text(serialize(dfa), encoding='utf-8')
    except OSError as e:
        return error(f"Cannot write dot file: {e}")

    for input_string in input_strings:
        verdict = 'accept' if dfa.accepts(input_string) else 'reject'
        print(f"{verdict}: {input_string}")

    logger.info("DONE")
    return EXIT_OK
