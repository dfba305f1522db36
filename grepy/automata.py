from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Set, Tuple, Union

# Label used for epsilon (empty) moves. Alphabet symbols are always exactly one
# character long, so the empty string can never clash with one.
EPSILON = ''


@dataclass(frozen=True, order=True)
class TransitionKey:
    """A state and a symbol, for use as a key in the transition relations of both automata."""
    state: int
    symbol: str = EPSILON

    @property
    def is_epsilon(self) -> bool:
        return self.symbol == EPSILON


@dataclass
class NFAState:
    """One slot of the NFA state arena. Owns the state's outgoing edges, in insertion order."""
    id: int
    edges: Dict[str, List[int]] = field(default_factory=dict)


class NFA:
    """
    Nondeterministic finite automaton with epsilon moves.

    States are allocated from an arena and identified by their index in it, so ids
    start at 0, only ever grow, and are never reused. Thompson's construction gives
    exactly one start and one end state.
    """

    def __init__(self, alphabet: Iterable[str] = ()):
        self.alphabet: FrozenSet[str] = frozenset(alphabet)
        self.start = 0
        self.end = 0
        self._arena: List[NFAState] = []
        self._targets: Set[int] = set()
        self._closure_cache: Dict[int, FrozenSet[int]] = {}

    @property
    def states(self) -> int:
        """Number of allocated state ids."""
        return len(self._arena)

    @property
    def accepting(self) -> FrozenSet[int]:
        return frozenset({self.end})

    @property
    def transitions(self) -> Dict[TransitionKey, Tuple[int, ...]]:
        """The transition relation, ordered by source state then by the order edges were added."""
        return {
            TransitionKey(record.id, symbol): tuple(targets)
            for record in self._arena
            for symbol, targets in record.edges.items()
        }

    def new_state(self) -> int:
        """Allocate a fresh state and return its id."""
        record = NFAState(len(self._arena))
        self._arena.append(record)
        return record.id

    def add_transition(self, from_state: int, symbol: str, to_state: int):
        """Add an edge; adding an edge that already exists is a no-op."""
        for state in (from_state, to_state):
            if not 0 <= state < self.states:
                raise ValueError(f"State {state} has not been allocated (NFA has {self.states} states)")
        if symbol != EPSILON and symbol not in self.alphabet:
            raise ValueError(f"Symbol '{symbol}' is not in the alphabet")

        targets = self._arena[from_state].edges.setdefault(symbol, [])
        if to_state not in targets:
            targets.append(to_state)
            self._targets.add(to_state)
            self._closure_cache.clear()

    def has_incoming(self, state: int) -> bool:
        return state in self._targets

    def has_outgoing(self, state: int) -> bool:
        return any(self._arena[state].edges.values())

    def destinations(self, state: int, symbol: str) -> Tuple[int, ...]:
        """Direct successors of `state` on `symbol`, without any epsilon moves."""
        if not 0 <= state < self.states:
            return ()
        return tuple(self._arena[state].edges.get(symbol, ()))

    def epsilon_closure(self, states: Union[int, Iterable[int]]) -> FrozenSet[int]:
        """
        States reachable using only epsilon moves.

        For a single state the traversal starts from its direct epsilon successors, so
        the state itself is only part of the result when an epsilon cycle leads back to
        it. For an iterable of states the result is the union of the per-state closures.
        """
        if not isinstance(states, int):
            closure = set()
            for state in states:
                closure |= self.epsilon_closure(state)
            return frozenset(closure)

        state = states
        if state in self._closure_cache:
            return self._closure_cache[state]

        closure = set()
        worklist = list(self.destinations(state, EPSILON))
        while worklist:
            current = worklist.pop()
            if current in closure:
                continue
            closure.add(current)
            worklist.extend(self.destinations(current, EPSILON))

        result = frozenset(closure)
        self._closure_cache[state] = result
        return result

    def connected_states(self, state: int, symbol: str) -> FrozenSet[int]:
        """One move on `symbol` from `state` followed by any number of epsilon moves."""
        moved = self.destinations(state, symbol)
        if not moved:
            return frozenset()
        return frozenset(moved) | self.epsilon_closure(moved)

    def start_states(self) -> FrozenSet[int]:
        return frozenset({self.start}) | self.epsilon_closure(self.start)

    def accepts(self, input_string: str) -> bool:
        """Simulate the NFA directly, tracking every state it could be in."""
        current = self.start_states()
        for symbol in input_string:
            following = set()
            for state in current:
                following |= self.connected_states(state, symbol)
            if not following:
                return False
            current = frozenset(following)
        return self.end in current

    def to_dict(self) -> Dict:
        """Convert to FSA dictionary format."""
        transitions = {}
        for record in self._arena:
            if record.edges:
                transitions[str(record.id)] = {
                    symbol: [str(target) for target in sorted(targets)]
                    for symbol, targets in sorted(record.edges.items())
                }
        return {
            'states': [str(record.id) for record in self._arena],
            'alphabet': sorted(self.alphabet),
            'transitions': transitions,
            'startingState': str(self.start),
            'acceptingStates': [str(state) for state in sorted(self.accepting)]
        }

    def __repr__(self):
        return f"NFA(states={self.states}, start={self.start}, end={self.end}, alphabet={sorted(self.alphabet)})"
