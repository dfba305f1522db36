import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from .automata import EPSILON, NFA

logger = logging.getLogger(__name__)

UNION = '+'
STAR = '*'
OPEN_GROUP = '('
CLOSE_GROUP = ')'
OPERATORS = frozenset({UNION, STAR, OPEN_GROUP, CLOSE_GROUP})

# Each open group costs a few Python stack frames while it is parsed
MAX_GROUP_DEPTH = 100


class RegexParseError(ValueError):
    """Base class for every error the regex parser can report."""
    kind = 'parse_error'

    def __init__(self, message: str, regex: str, position: int):
        super().__init__(f"{message} at position {position} in '{regex}'")
        self.regex = regex
        self.position = position


class UnexpectedEndOfInput(RegexParseError):
    kind = 'unexpected_end_of_input'


class CharacterNotInAlphabet(RegexParseError):
    kind = 'character_not_in_alphabet'


class UnmatchedParenthesis(RegexParseError):
    kind = 'unmatched_parenthesis'


class TrailingInput(RegexParseError):
    kind = 'trailing_input'


class NestingTooDeep(RegexParseError):
    kind = 'nesting_too_deep'


@dataclass(frozen=True)
class ParseResult:
    """Outcome of building an NFA: exactly one of `nfa` and `error` is set."""
    nfa: Optional[NFA] = None
    error: Optional[RegexParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> NFA:
        """Return the NFA, or raise the parse error."""
        if self.error is not None:
            raise self.error
        return self.nfa


Fragment = Tuple[int, int]


class RegexParser:
    """
    Recursive descent parser that builds a Thompson NFA while it reads the regex.

    Grammar, lowest precedence first:
        Union  := Concat ('+' Union)?
        Concat := Kleene Concat?
        Kleene := Symbol '*'?
        Symbol := alphabet-char | '(' Union ')'

    Every rule returns the (start, end) fragment it built. The cursor `pos` is shared
    by all rules and only ever moves forward.
    """

    def __init__(self, regex: str, alphabet: Iterable[str], nfa: Optional[NFA] = None):
        self.regex = regex
        self.pos = 0
        self.depth = 0
        self.nfa = nfa if nfa is not None else NFA(alphabet)
        self.alphabet = self.nfa.alphabet

    def peek(self) -> Optional[str]:
        """Look at current character without consuming."""
        return self.regex[self.pos] if self.pos < len(self.regex) else None

    def consume(self) -> Optional[str]:
        """Consume and return current character."""
        if self.pos < len(self.regex):
            char = self.regex[self.pos]
            self.pos += 1
            return char
        return None

    def parse(self) -> NFA:
        """Parse the whole regex into the NFA. Raises a RegexParseError subclass on failure."""
        start, end = self.parse_union()

        if self.pos < len(self.regex):
            # parse_union only stops early at a ')' it has no group for
            raise TrailingInput(f"Unexpected '{self.peek()}' after complete expression", self.regex, self.pos)

        self.nfa.start = start
        self.nfa.end = end
        return self.nfa

    def parse_union(self) -> Fragment:
        """Parse union (+) - lowest precedence."""
        alternatives = [self.parse_concat()]

        while self.peek() == UNION:
            self.consume()  # consume '+'
            alternatives.append(self.parse_concat())

        char = self.peek()
        if char is not None and char != CLOSE_GROUP:
            raise TrailingInput(f"Invalid character '{char}' beyond expression", self.regex, self.pos)

        # '+' groups to the right: a+b+c is a+(b+c)
        right_start, right_end = alternatives.pop()
        while alternatives:
            left_start, left_end = alternatives.pop()

            union_start = self.nfa.new_state()
            union_end = self.nfa.new_state()
            self.nfa.add_transition(union_start, EPSILON, left_start)
            self.nfa.add_transition(union_start, EPSILON, right_start)
            self.nfa.add_transition(left_end, EPSILON, union_end)
            self.nfa.add_transition(right_end, EPSILON, union_end)

            right_start, right_end = union_start, union_end

        return right_start, right_end

    def parse_concat(self) -> Fragment:
        """Parse concatenation - implicit, higher precedence than union."""
        start, end = self.parse_kleene()

        while self.peek() not in (None, CLOSE_GROUP, UNION):
            right_start, right_end = self.parse_kleene()
            self.nfa.add_transition(end, EPSILON, right_start)
            end = right_end

        return start, end

    def parse_kleene(self) -> Fragment:
        """Parse an optional Kleene star - highest precedence."""
        start, end = self.parse_symbol()

        if self.peek() != STAR:
            return start, end
        self.consume()  # consume '*'

        if self.nfa.has_incoming(start) or self.nfa.has_outgoing(end):
            # The group begins or ends with a starred element of its own. Looping on
            # those shared states would let the new skip edge jump into the middle of
            # the group, so give the star a boundary of its own.
            outer_start = self.nfa.new_state()
            outer_end = self.nfa.new_state()
            self.nfa.add_transition(outer_start, EPSILON, start)
            self.nfa.add_transition(end, EPSILON, outer_end)
            start, end = outer_start, outer_end

        self.nfa.add_transition(end, EPSILON, start)  # loop
        self.nfa.add_transition(start, EPSILON, end)  # skip
        return start, end

    def parse_symbol(self) -> Fragment:
        """Parse a literal or a parenthesised group."""
        char = self.peek()

        if char is None:
            raise UnexpectedEndOfInput("Expected a symbol but reached the end of the regex", self.regex, self.pos)

        if char == OPEN_GROUP:
            open_pos = self.pos
            if self.depth >= MAX_GROUP_DEPTH:
                raise NestingTooDeep(f"Groups nested deeper than {MAX_GROUP_DEPTH} levels", self.regex, open_pos)
            self.consume()  # consume '('
            self.depth += 1
            inner = self.parse_union()
            self.depth -= 1
            if self.peek() != CLOSE_GROUP:
                raise UnmatchedParenthesis(f"Missing ')' for the group opened at index {open_pos}", self.regex, self.pos)
            self.consume()  # consume ')'
            return inner

        if char in OPERATORS or char not in self.alphabet:
            raise CharacterNotInAlphabet(f"Character '{char}' is not in the alphabet", self.regex, self.pos)

        self.consume()
        start = self.nfa.new_state()
        end = self.nfa.new_state()
        self.nfa.add_transition(start, char, end)
        return start, end


def normalize_alphabet(symbols: Iterable[str]) -> FrozenSet[str]:
    """
    Turn a string or an iterable of one-character strings into an alphabet.

    Raises:
        ValueError: If any symbol is not exactly one character long
    """
    alphabet = set()
    for symbol in symbols:
        if not isinstance(symbol, str) or len(symbol) != 1:
            raise ValueError(f"Alphabet symbols must be single characters, got {symbol!r}")
        alphabet.add(symbol)
    return frozenset(alphabet)


def alphabet_from_strings(strings: Iterable[str]) -> FrozenSet[str]:
    """Every character that occurs in any of the given strings."""
    alphabet = set()
    for string in strings:
        alphabet.update(string)
    return frozenset(alphabet)


def build_nfa(regex: str, alphabet: Iterable[str]) -> ParseResult:
    """
    Convert a regular expression over `alphabet` to an NFA using Thompson's construction.

    Args:
        regex (str): The regular expression to convert. Supports:
            - Symbols of the alphabet: a, b, 0, 1, etc.
            - Union: + (e.g., "a+b")
            - Concatenation: implicit (e.g., "ab")
            - Kleene star: * (e.g., "a*")
            - Parentheses: () for grouping
        alphabet: The symbols the NFA is defined over

    Returns:
        ParseResult: holding the NFA, or the first parse error met. A failed parse
        never hands out a partially built NFA.
    """
    parser = RegexParser(regex, normalize_alphabet(alphabet))
    try:
        nfa = parser.parse()
    except RegexParseError as e:
        return ParseResult(error=e)

    logger.debug("Built NFA for %r: %d states", regex, nfa.states)
    return ParseResult(nfa=nfa)


def validate_regex_syntax(regex: str, alphabet: Iterable[str]) -> Dict[str, object]:
    """
    Validate regex syntax against an alphabet.

    Returns:
        Dict with 'valid' (bool) and, when invalid, 'error', 'kind' and 'position' keys
    """
    result = build_nfa(regex, alphabet)
    if result.ok:
        return {'valid': True}
    return {
        'valid': False,
        'error': str(result.error),
        'kind': result.error.kind,
        'position': result.error.position
    }
