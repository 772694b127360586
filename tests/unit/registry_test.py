import re
from unittest import TestCase

from virtual.registry import Registry


def handler(req, res):
    res.send('ok')


class TestRegistry(TestCase):
    def setUp(self):
        self.__sut = Registry()

    def test_add_normalizes_method(self):
        endpoint = self.__sut.add('get', '/food/:kind', handler)

        self.assertEqual('GET', endpoint.method)
        self.assertIn(endpoint, self.__sut)
        self.assertEqual(1, len(self.__sut))

    def test_resolve_template(self):
        self.__sut.add('GET', '/food/:kind', handler)

        result = self.__sut.resolve('GET', '/food/X')

        self.assertEqual('X', result.params['kind'])

    def test_resolve_regex(self):
        self.__sut.add('GET', re.compile(r'/food/(\w+)'), handler)

        result = self.__sut.resolve('GET', 'http://example.com/food/X')

        self.assertEqual('X', result.params[0])

    def test_first_registered_wins(self):
        first = self.__sut.add('GET', '/food/:kind', handler)
        self.__sut.add('GET', re.compile(r'/food/(\w+)'), handler)
        self.__sut.add('GET', '/food/peas', handler)

        result = self.__sut.resolve('GET', '/food/peas')

        self.assertIs(first, result.endpoint)

    def test_no_match(self):
        self.__sut.add('GET', '/food/:kind', handler)

        self.assertIsNone(self.__sut.resolve('GET', '/drink/tea'))
        self.assertIsNone(self.__sut.resolve('DELETE', '/food/peas'))

    def test_remove(self):
        first = self.__sut.add('GET', '/food/:kind', handler)
        second = self.__sut.add('GET', '/food/:kind', handler)

        self.__sut.remove(first)

        self.assertNotIn(first, self.__sut)
        self.assertIs(second, self.__sut.resolve('GET', '/food/peas').endpoint)

    def test_remove_twice_is_a_no_op(self):
        endpoint = self.__sut.add('GET', '/food/:kind', handler)

        self.__sut.remove(endpoint)
        self.__sut.remove(endpoint)

        self.assertEqual(0, len(self.__sut))
        self.assertIsNone(self.__sut.resolve('GET', '/food/peas'))

    def test_clear(self):
        self.__sut.add('GET', '/food/:kind', handler)
        self.__sut.add('POST', '/food/:kind', handler)

        self.__sut.clear()

        self.assertEqual([], list(self.__sut))
