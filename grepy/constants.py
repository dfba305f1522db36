"""Application-wide constants for the grepy command line tool and API."""

APP_NAME = 'grepy'
VERSION = '0.0.1'

# Default output files for the DOT renderings
DEFAULT_NFA_FILE = 'nfa.dot'
DEFAULT_DFA_FILE = 'dfa.dot'
