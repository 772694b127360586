from ddt import ddt, data, unpack
from mockito import mock, unstub, verify, when
from unittest import TestCase

from virtual.cache import MemoryCache, is_cacheable, payload_equal
from virtual.context import synthesize_response
from virtual.model import RequestDescriptor


@ddt
class TestPayloadEqual(TestCase):
    @data(
        (RequestDescriptor(url='/peas', body={'a': 1}), RequestDescriptor(url='/peas', body={'a': 1}), True),
        (RequestDescriptor(url='/peas', body={'a': 1}), RequestDescriptor(url='/peas', body={'a': 2}), False),
        (RequestDescriptor(url='/peas'), RequestDescriptor(url='/peas'), True),
        (RequestDescriptor(url='/peas', query={'q': '1'}), RequestDescriptor(url='/peas', query={'q': '2'}), False),
    )
    @unpack
    def test_payload_equal(self, previous, current, expected):
        self.assertEqual(expected, payload_equal(previous, current))


@ddt
class TestIsCacheable(TestCase):
    @data(
        (200, True),
        (301, True),
        (404, False),
        (503, False),
    )
    @unpack
    def test_status(self, status, expected):
        response = synthesize_response(RequestDescriptor(url='/tea'), status, {}, b'')

        self.assertEqual(expected, is_cacheable(response))

    def test_values_without_status(self):
        self.assertTrue(is_cacheable('hello!'))


@ddt
class TestMemoryCache(TestCase):
    def setUp(self):
        self.__sut = MemoryCache()

    def tearDown(self):
        unstub()

    def test_miss_when_empty(self):
        self.assertIsNone(self.__sut.lookup(RequestDescriptor(url='/peas')))

    @data(
        # Same url, method and payload.
        (RequestDescriptor(url='/peas', body='x'), False, True),
        # Method is part of the key.
        (RequestDescriptor(url='/peas', method='POST', body='x'), False, False),
        (RequestDescriptor(url='/peas', method='POST', body='x'), True, False),
        # So is the url.
        (RequestDescriptor(url='/carrots', body='x'), True, False),
        # A different payload misses unless forced.
        (RequestDescriptor(url='/peas', body='y'), False, False),
        (RequestDescriptor(url='/peas', body='y'), True, True),
    )
    @unpack
    def test_lookup(self, request, force, expected_hit):
        self.__sut.store(RequestDescriptor(url='/peas', body='x'), 'cached')

        entry = self.__sut.lookup(request, force=force)

        if expected_hit:
            self.assertEqual('cached', entry.response)
        else:
            self.assertIsNone(entry)

    def test_store_overwrites(self):
        first = self.__sut.store(RequestDescriptor(url='/peas', body='x'), 'first')
        second = self.__sut.store(RequestDescriptor(url='/peas', body='y'), 'second')

        entry = self.__sut.lookup(RequestDescriptor(url='/peas', body='y'))

        self.assertEqual('second', entry.response)
        self.assertGreater(second.version, first.version)
        self.assertIsNone(self.__sut.lookup(RequestDescriptor(url='/peas', body='x')))
        self.assertEqual(1, len(self.__sut))

    def test_match_overrides_comparator(self):
        previous = RequestDescriptor(url='/peas', body='x')
        current = RequestDescriptor(url='/peas', body='y')
        comparator = mock()
        when(comparator).compare(previous, current).thenReturn(True)
        self.__sut.store(previous, 'cached')

        entry = self.__sut.lookup(current, match=comparator.compare)

        self.assertEqual('cached', entry.response)
        verify(comparator).compare(previous, current)

    def test_comparator_given_at_construction(self):
        sut = MemoryCache(match=lambda previous, current: False)
        request = RequestDescriptor(url='/peas')
        sut.store(request, 'cached')

        self.assertIsNone(sut.lookup(request))
        self.assertEqual('cached', sut.lookup(request, force=True).response)

    def test_delete_and_clear(self):
        self.__sut.store(RequestDescriptor(url='/peas'), 'peas')
        self.__sut.store(RequestDescriptor(url='/carrots'), 'carrots')

        self.__sut.delete(RequestDescriptor(url='/peas'))
        self.__sut.delete(RequestDescriptor(url='/unknown'))

        self.assertIsNone(self.__sut.lookup(RequestDescriptor(url='/peas')))
        self.assertEqual(1, len(self.__sut))

        self.__sut.clear()

        self.assertEqual(0, len(self.__sut))
