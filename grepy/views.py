import json
import logging

from django.conf import settings
from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .dot_export import serialize
from .fsa_transformations import build_dfa
from .regex_conversions import alphabet_from_strings, build_nfa, normalize_alphabet

logger = logging.getLogger(__name__)

DEFAULT_MAX_REGEX_LENGTH = 256


class BadRequest(ValueError):
    pass


def _read_request(request):
    """
    Parse the JSON body shared by every endpoint.

    Returns:
        (data, regex, alphabet). The alphabet comes from the 'alphabet' key when
        present, otherwise from the characters of the 'inputs' strings.
    """
    try:
        data = json.loads(request.body)
    except json.JSONDecodeError as e:
        raise BadRequest(f'Invalid JSON body: {e}')
    if not isinstance(data, dict):
        raise BadRequest('Request body must be a JSON object')

    regex = data.get('regex')
    if not isinstance(regex, str):
        raise BadRequest('Missing regex parameter')

    max_length = getattr(settings, 'GREPY_MAX_REGEX_LENGTH', DEFAULT_MAX_REGEX_LENGTH)
    if len(regex) > max_length:
        raise BadRequest(f'Regex is longer than {max_length} characters')

    inputs = data.get('inputs', [])
    if not isinstance(inputs, list) or not all(isinstance(item, str) for item in inputs):
        raise BadRequest('inputs must be a list of strings')

    if data.get('alphabet') is not None:
        if not isinstance(data['alphabet'], (str, list)):
            raise BadRequest('alphabet must be a string or a list of characters')
        alphabet = normalize_alphabet(data['alphabet'])
    else:
        alphabet = alphabet_from_strings(inputs)

    return data, regex, alphabet


def _parse_error_response(error):
    return JsonResponse({
        'error': str(error),
        'kind': error.kind,
        'position': error.position
    }, status=400)


def _transition_count(fsa):
    return sum(
        len(targets) for state_transitions in fsa['transitions'].values()
        for targets in state_transitions.values()
    )


@csrf_exempt
@require_POST
def regex_to_nfa(request):
    """
    Django view to handle regex -> NFA conversion requests.

    Expects a POST request with a JSON body containing:
    - regex: The regular expression to convert
    - alphabet: The symbols of the language (or inputs, to derive them from)

    Returns a JSON response with the NFA plus some summary statistics.
    """
    try:
        _, regex, alphabet = _read_request(request)

        result = build_nfa(regex, alphabet)
        if not result.ok:
            return _parse_error_response(result.error)

        nfa = result.nfa.to_dict()
        return JsonResponse({
            'success': True,
            'regex': regex,
            'alphabet': sorted(alphabet),
            'nfa': nfa,
            'statistics': {
                'states_count': len(nfa['states']),
                'transitions_count': _transition_count(nfa),
                'epsilon_transitions_count': sum(
                    len(state_transitions.get('', [])) for state_transitions in nfa['transitions'].values()
                )
            }
        })

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception('Regex to NFA conversion failed')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def regex_to_dfa(request):
    """
    Django view to handle regex -> DFA conversion requests (via the Thompson NFA).
    """
    try:
        _, regex, alphabet = _read_request(request)

        result = build_nfa(regex, alphabet)
        if not result.ok:
            return _parse_error_response(result.error)

        dfa = build_dfa(result.nfa, alphabet)
        nfa_dict = result.nfa.to_dict()
        dfa_dict = dfa.to_dict()

        return JsonResponse({
            'success': True,
            'regex': regex,
            'alphabet': sorted(alphabet),
            'nfa': nfa_dict,
            'dfa': dfa_dict,
            'subset_labels': {str(state): label for state, label in sorted(dfa.subset_labels.items())},
            'statistics': {
                'nfa_states_count': len(nfa_dict['states']),
                'dfa_states_count': len(dfa_dict['states']),
                'dfa_transitions_count': _transition_count(dfa_dict),
                'accepting_states_count': len(dfa_dict['acceptingStates'])
            }
        })

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception('Regex to DFA conversion failed')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def simulate(request):
    """
    Django view to test a list of strings against a regex.

    Expects a POST request with a JSON body containing:
    - regex: The regular expression
    - inputs: The strings to test
    - alphabet: Optional, derived from inputs when missing

    Returns a JSON response with one result per input, in order.
    """
    try:
        data, regex, alphabet = _read_request(request)

        result = build_nfa(regex, alphabet)
        if not result.ok:
            return _parse_error_response(result.error)

        dfa = build_dfa(result.nfa, alphabet)
        results = []
        for input_string in data.get('inputs', []):
            entry = {'input': input_string}
            entry.update(dfa.trace(input_string).to_dict())
            results.append(entry)

        return JsonResponse({
            'regex': regex,
            'alphabet': sorted(alphabet),
            'results': results,
            'accepted_count': sum(1 for entry in results if entry['accepted'])
        })

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception('Simulation failed')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def export_dot(request):
    """
    Django view returning the DOT source of the NFA or DFA for a regex.

    The 'automaton' key selects which one ('nfa' or 'dfa', default 'dfa').
    """
    try:
        data, regex, alphabet = _read_request(request)

        automaton = data.get('automaton', 'dfa')
        if automaton not in ('nfa', 'dfa'):
            return JsonResponse({'error': "automaton must be 'nfa' or 'dfa'"}, status=400)

        result = build_nfa(regex, alphabet)
        if not result.ok:
            return _parse_error_response(result.error)

        if automaton == 'nfa':
            source = serialize(result.nfa)
        else:
            source = serialize(build_dfa(result.nfa, alphabet))

        return HttpResponse(source, content_type='text/vnd.graphviz')

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception('DOT export failed')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)
