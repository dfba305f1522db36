import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .automata import NFA, TransitionKey

logger = logging.getLogger(__name__)


def subset_label(subset: Iterable[int]) -> str:
    """Human readable rendering of a set of NFA states, e.g. '{0, 1, 3}'."""
    return '{' + ', '.join(str(state) for state in sorted(subset)) + '}'


@dataclass
class Trace:
    """Result of running a DFA over an input string."""
    accepted: bool
    path: List[Tuple[int, str, int]] = field(default_factory=list)
    rejection_reason: Optional[str] = None
    rejection_position: Optional[int] = None

    def to_dict(self) -> Dict:
        result = {'accepted': self.accepted, 'path': [list(step) for step in self.path]}
        if not self.accepted:
            result['rejection_reason'] = self.rejection_reason
            result['rejection_position'] = self.rejection_position
        return result


class DFA:
    """
    Deterministic finite automaton produced from an NFA by subset construction.

    State 0 is always the start state. The transition function is partial: a missing
    (state, symbol) entry means the input is rejected.
    """

    start = 0

    def __init__(self, alphabet: Iterable[str] = ()):
        self.alphabet: FrozenSet[str] = frozenset(alphabet)
        self.states = 0
        self.transitions: Dict[TransitionKey, int] = {}
        self.accepting: Set[int] = set()
        self.subset_labels: Dict[int, str] = {}
        self.subsets: Dict[int, FrozenSet[int]] = {}

    @classmethod
    def from_nfa(cls, nfa: NFA, alphabet: Optional[Iterable[str]] = None) -> 'DFA':
        """
        Converts an NFA to a DFA using the subset construction algorithm.

        Args:
            nfa (NFA): A fully built NFA
            alphabet: Symbols to build transitions for, defaults to the NFA's alphabet

        Returns:
            DFA: A DFA where each state represents a subset of NFA states. Only subsets
            reachable from the start subset get a state; their number is bounded by
            2 ** nfa.states.
        """
        dfa = cls(nfa.alphabet if alphabet is None else alphabet)
        symbols = sorted(dfa.alphabet)

        # Maps each subset to the DFA state standing for it
        subset_to_state: Dict[FrozenSet[int], int] = {}

        start_subset = nfa.start_states()
        subset_to_state[start_subset] = dfa._new_state(start_subset)

        unprocessed: Deque[FrozenSet[int]] = deque([start_subset])
        processed: Set[FrozenSet[int]] = set()

        while unprocessed:
            current_subset = unprocessed.popleft()

            # The same subset can be queued more than once before it is first processed
            if current_subset in processed:
                continue
            processed.add(current_subset)

            current_state = subset_to_state[current_subset]
            if nfa.end in current_subset:
                dfa.accepting.add(current_state)
            dfa.subset_labels[current_state] = subset_label(current_subset)

            for symbol in symbols:
                next_subset = set()
                for nfa_state in current_subset:
                    next_subset |= nfa.connected_states(nfa_state, symbol)

                # No move on this symbol: leave it out, the DFA rejects here
                if not next_subset:
                    continue

                next_subset = frozenset(next_subset)
                if next_subset not in subset_to_state:
                    subset_to_state[next_subset] = dfa._new_state(next_subset)

                dfa.transitions[TransitionKey(current_state, symbol)] = subset_to_state[next_subset]
                unprocessed.append(next_subset)

        logger.debug("Subset construction produced %d DFA states from %d NFA states", dfa.states, nfa.states)
        return dfa

    def _new_state(self, subset: FrozenSet[int]) -> int:
        state = self.states
        self.states += 1
        self.subsets[state] = subset
        return state

    def next_state(self, state: int, symbol: str) -> Optional[int]:
        return self.transitions.get(TransitionKey(state, symbol))

    def trace(self, input_string: str) -> Trace:
        """Run the DFA over `input_string`, recording every step taken."""
        current_state = self.start
        path = []

        for position, symbol in enumerate(input_string):
            next_state = self.next_state(current_state, symbol)
            if next_state is None:
                if symbol not in self.alphabet:
                    reason = f"Symbol '{symbol}' not in alphabet"
                else:
                    reason = f"No transition defined for symbol '{symbol}' from state {current_state}"
                return Trace(False, path, reason, position)

            path.append((current_state, symbol, next_state))
            current_state = next_state

        if current_state in self.accepting:
            return Trace(True, path)
        return Trace(False, path, f"Final state {current_state} is not an accepting state", len(input_string))

    def accepts(self, input_string: str) -> bool:
        """True iff the DFA ends in an accepting state after reading all of `input_string`."""
        return self.trace(input_string).accepted

    def to_dict(self) -> Dict:
        """Convert to FSA dictionary format."""
        transitions = {}
        for key in sorted(self.transitions):
            transitions.setdefault(str(key.state), {})[key.symbol] = [str(self.transitions[key])]
        return {
            'states': [str(state) for state in range(self.states)],
            'alphabet': sorted(self.alphabet),
            'transitions': transitions,
            'startingState': str(self.start),
            'acceptingStates': [str(state) for state in sorted(self.accepting)]
        }

    def __repr__(self):
        return f"DFA(states={self.states}, accepting={sorted(self.accepting)}, alphabet={sorted(self.alphabet)})"


def build_dfa(nfa: NFA, alphabet: Optional[Iterable[str]] = None) -> DFA:
    """Build the DFA equivalent to `nfa` over `alphabet`."""
    return DFA.from_nfa(nfa, alphabet)
