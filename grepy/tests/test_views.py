import json
from django.test import TestCase, Client, override_settings


class GrepyViewTestCase(TestCase):
    """Base test case with a JSON helper"""

    def setUp(self):
        self.client = Client()

    def post_json(self, url, data):
        """Helper method to send JSON POST requests"""
        return self.client.post(
            url,
            data=json.dumps(data),
            content_type='application/json'
        )


class RegexToNfaViewTests(GrepyViewTestCase):

    def test_convert(self):
        response = self.post_json('/api/regex-to-nfa/', {'regex': 'a+b', 'alphabet': 'ab'})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['success'])
        self.assertEqual(data['alphabet'], ['a', 'b'])
        self.assertEqual(data['nfa']['startingState'], '4')
        self.assertEqual(data['nfa']['acceptingStates'], ['5'])
        self.assertEqual(data['statistics']['states_count'], 6)
        self.assertEqual(data['statistics']['transitions_count'], 6)
        self.assertEqual(data['statistics']['epsilon_transitions_count'], 4)

    def test_alphabet_from_inputs(self):
        response = self.post_json('/api/regex-to-nfa/', {'regex': 'ab', 'inputs': ['ab', 'ba', 'c']})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['alphabet'], ['a', 'b', 'c'])

    def test_parse_error(self):
        response = self.post_json('/api/regex-to-nfa/', {'regex': '(a', 'alphabet': ['a']})
        self.assertEqual(response.status_code, 400)
        data = response.json()
        self.assertEqual(data['kind'], 'unmatched_parenthesis')
        self.assertEqual(data['position'], 2)
        self.assertIn('error', data)

    def test_missing_regex(self):
        response = self.post_json('/api/regex-to-nfa/', {'alphabet': 'a'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Missing regex parameter')

    def test_invalid_json(self):
        response = self.client.post('/api/regex-to-nfa/', data='{not json', content_type='application/json')
        self.assertEqual(response.status_code, 400)

    def test_invalid_alphabet(self):
        response = self.post_json('/api/regex-to-nfa/', {'regex': 'a', 'alphabet': ['ab']})
        self.assertEqual(response.status_code, 400)
        response = self.post_json('/api/regex-to-nfa/', {'regex': 'a', 'alphabet': 5})
        self.assertEqual(response.status_code, 400)

    def test_get_not_allowed(self):
        response = self.client.get('/api/regex-to-nfa/')
        self.assertEqual(response.status_code, 405)

    @override_settings(GREPY_MAX_REGEX_LENGTH=3)
    def test_regex_too_long(self):
        response = self.post_json('/api/regex-to-nfa/', {'regex': 'aaaa', 'alphabet': 'a'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('longer than 3', response.json()['error'])


class RegexToDfaViewTests(GrepyViewTestCase):

    def test_convert(self):
        response = self.post_json('/api/regex-to-dfa/', {'regex': 'a+b', 'alphabet': 'ab'})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['dfa'], {
            'states': ['0', '1', '2'],
            'alphabet': ['a', 'b'],
            'transitions': {'0': {'a': ['1'], 'b': ['2']}},
            'startingState': '0',
            'acceptingStates': ['1', '2']
        })
        self.assertEqual(data['subset_labels'], {'0': '{0, 2, 4}', '1': '{1, 5}', '2': '{3, 5}'})
        self.assertEqual(data['statistics']['nfa_states_count'], 6)
        self.assertEqual(data['statistics']['dfa_states_count'], 3)
        self.assertEqual(data['statistics']['accepting_states_count'], 2)

    def test_character_not_in_alphabet(self):
        response = self.post_json('/api/regex-to-dfa/', {'regex': 'az', 'alphabet': 'a'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['kind'], 'character_not_in_alphabet')


class SimulateViewTests(GrepyViewTestCase):

    def test_simulate(self):
        response = self.post_json('/api/simulate/', {'regex': 'a+b', 'inputs': ['a', 'ab', 'b', '']})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual([entry['input'] for entry in data['results']], ['a', 'ab', 'b', ''])
        self.assertEqual([entry['accepted'] for entry in data['results']], [True, False, True, False])
        self.assertEqual(data['accepted_count'], 2)

        rejected = data['results'][1]
        self.assertEqual(rejected['path'], [[0, 'a', 1]])
        self.assertEqual(rejected['rejection_position'], 1)

    def test_simulate_with_alphabet(self):
        response = self.post_json('/api/simulate/', {
            'regex': '(a+b)*c',
            'alphabet': 'abc',
            'inputs': ['c', 'ac', 'bc', 'abac', '', 'ab', 'ca']
        })
        data = response.json()
        self.assertEqual([entry['accepted'] for entry in data['results']],
                         [True, True, True, True, False, False, False])

    def test_inputs_must_be_strings(self):
        response = self.post_json('/api/simulate/', {'regex': 'a', 'inputs': [1, 2]})
        self.assertEqual(response.status_code, 400)

    def test_parse_error(self):
        response = self.post_json('/api/simulate/', {'regex': 'a+', 'inputs': ['a']})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['kind'], 'unexpected_end_of_input')


class ExportDotViewTests(GrepyViewTestCase):

    def test_export_dfa_by_default(self):
        response = self.post_json('/api/export-dot/', {'regex': 'a', 'alphabet': 'a'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'text/vnd.graphviz')
        self.assertTrue(response.content.decode().startswith('digraph dfa {'))

    def test_export_nfa(self):
        response = self.post_json('/api/export-dot/', {'regex': 'a', 'alphabet': 'a', 'automaton': 'nfa'})
        self.assertEqual(response.status_code, 200)
        body = response.content.decode()
        self.assertTrue(body.startswith('digraph nfa {'))
        self.assertIn('\t0 -> 1 [label=a]', body.splitlines())

    def test_unknown_automaton(self):
        response = self.post_json('/api/export-dot/', {'regex': 'a', 'alphabet': 'a', 'automaton': 'gnfa'})
        self.assertEqual(response.status_code, 400)

    def test_parse_error(self):
        response = self.post_json('/api/export-dot/', {'regex': 'a)', 'alphabet': 'a'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['kind'], 'trailing_input')


class ParserLimitViewTests(GrepyViewTestCase):

    @override_settings(GREPY_MAX_REGEX_LENGTH=1000)
    def test_deep_nesting_is_a_client_error(self):
        regex = '(' * 300 + 'a' + ')' * 300
        response = self.post_json('/api/regex-to-nfa/', {'regex': regex, 'alphabet': 'a'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['kind'], 'nesting_too_deep')
        self.assertEqual(response.json()['position'], 100)
