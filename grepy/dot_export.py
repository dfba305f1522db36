from typing import Dict, Iterable, List, Tuple, Union

from graphviz import Digraph, escape

from .automata import NFA
from .fsa_transformations import DFA

EPSILON_LABEL = 'epsilon'
START_MARKER = 'start'


def _nfa_edges(nfa: NFA) -> List[Tuple[int, int, str]]:
    edges = []
    for key, targets in nfa.transitions.items():
        label = EPSILON_LABEL if key.is_epsilon else key.symbol
        edges.extend((key.state, target, label) for target in targets)
    return sorted(edges)


def _dfa_edges(dfa: DFA) -> List[Tuple[int, int, str]]:
    return sorted((key.state, target, key.symbol) for key, target in dfa.transitions.items())


def _render(name: str, start: int, accepting: Iterable[int], labels: Dict[int, str],
            edges: List[Tuple[int, int, str]]) -> str:
    dot = Digraph(name=name)

    for state in sorted(accepting):
        dot.node(str(state), shape='doublecircle')

    # Invisible node so the start state gets an incoming arrow
    dot.node(START_MARKER, label='', shape='none')
    dot.edge(START_MARKER, str(start))

    for state in sorted(labels):
        dot.node(str(state), label=labels[state])

    # Symbols are arbitrary characters; a backslash must not start a DOT escape
    for source, target, label in edges:
        dot.edge(str(source), str(target), label=escape(label))

    return dot.source


def nfa_to_dot(nfa: NFA) -> str:
    labels = {state: str(state) for state in range(nfa.states)}
    return _render('nfa', nfa.start, nfa.accepting, labels, _nfa_edges(nfa))


def dfa_to_dot(dfa: DFA) -> str:
    labels = {state: dfa.subset_labels.get(state, str(state)) for state in range(dfa.states)}
    return _render('dfa', dfa.start, dfa.accepting, labels, _dfa_edges(dfa))


def serialize(automaton: Union[NFA, DFA]) -> str:
    """
    Render an NFA or a DFA as Graphviz DOT source.

    The output only depends on the automaton's contents: states, accepting states and
    edges are always written in ascending order.
    """
    if isinstance(automaton, NFA):
        return nfa_to_dot(automaton)
    if isinstance(automaton, DFA):
        return dfa_to_dot(automaton)
    raise TypeError(f"Cannot serialize {type(automaton).__name__}, expected an NFA or a DFA")
