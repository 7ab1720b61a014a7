from io import BytesIO
from mockito import when, verify, unstub
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase

from cproxy import agent, transport
from cproxy.errors import ConnectError, LiveOutputError, LocalIOError, ResolutionError, StreamReadError
from cproxy.model import RequestTarget, Settings

from fake_server import BrokenPipeOutput, FakeConnection, OneShotServer, RESPONSE


class TestCachingAgent(TestCase):
    def setUp(self):
        self.__directory = TemporaryDirectory()
        self.directory = Path(self.__directory.name)
        self.output = BytesIO()
        self.sut = agent.create(Settings(cache_root=self.directory), self.output)

    def tearDown(self):
        unstub()
        self.__directory.cleanup()

    def test_cache_miss_fetches_and_stores(self):
        connection = FakeConnection(RESPONSE)
        when(transport).connect('example.test', 80).thenReturn(connection)

        result = self.sut.retrieve(RequestTarget.from_url('http://example.test/a/b.html'))

        expected_path = self.directory / 'example.test' / 'a' / 'b.html'
        self.assertEqual(43, result.total_bytes)
        self.assertFalse(result.from_cache)
        self.assertEqual(expected_path, result.local_path)
        self.assertEqual(b'hello', expected_path.read_bytes())
        self.assertEqual([b'GET /a/b.html HTTP/1.0\r\nHost: example.test\r\n\r\n'], connection.sent)
        self.assertTrue(connection.closed)

        output = self.output.getvalue()
        self.assertTrue(output.startswith(
            b'HTTP request =\nGET /a/b.html HTTP/1.0\r\nHost: example.test\r\n\r\n\nLEN = 46\n'))
        self.assertIn(RESPONSE, output)
        self.assertTrue(output.endswith(b'\n Total response bytes: 43\n'))

    def test_cache_hit_skips_network(self):
        cached = self.directory / 'example.test' / 'a' / 'b.html'
        cached.parent.mkdir(parents=True)
        cached.write_bytes(b'hello')
        when(transport).connect(...).thenRaise(ConnectError('example.test', 80))

        result = self.sut.retrieve(RequestTarget.from_url('http://example.test/a/b.html'))

        verify(transport, times=0).connect(...)
        self.assertEqual(5, result.total_bytes)
        self.assertTrue(result.from_cache)
        self.assertEqual(cached, result.local_path)
        self.assertEqual(
            b'File is given from local filesystem\n'
            b'HTTP/1.0 200 OK\r\nContent-Length: 5\r\n\r\nhello'
            b'\n Total response bytes: 5\n',
            self.output.getvalue())

    def test_second_retrieval_is_served_from_cache(self):
        when(transport).connect('example.test', 80).thenReturn(FakeConnection(RESPONSE))
        target = RequestTarget.from_url('http://example.test/a/b.html')

        first = self.sut.retrieve(target)
        second = self.sut.retrieve(target)

        verify(transport, times=1).connect('example.test', 80)
        self.assertFalse(first.from_cache)
        self.assertTrue(second.from_cache)
        self.assertEqual(5, second.total_bytes)

    def test_not_found_is_shown_but_not_cached(self):
        response = b'HTTP/1.1 404 Not Found\r\n\r\nno such page'
        when(transport).connect('example.test', 80).thenReturn(FakeConnection(response))

        result = self.sut.retrieve(RequestTarget.from_url('http://example.test/'))

        self.assertEqual(len(response), result.total_bytes)
        self.assertFalse(result.local_path.exists())
        self.assertIn(response, self.output.getvalue())

    def test_resolution_failure_propagates(self):
        when(transport).connect(...).thenRaise(ResolutionError('nowhere.invalid'))

        with self.assertRaises(ResolutionError):
            self.sut.retrieve(RequestTarget.from_url('http://nowhere.invalid/'))
        self.assertFalse((self.directory / 'nowhere.invalid').exists())

    def test_against_a_real_socket(self):
        with OneShotServer(RESPONSE) as server:
            target = RequestTarget.from_url('http://127.0.0.1:{}/a/'.format(server.port))
            result = self.sut.retrieve(target)

        self.assertEqual([b'GET /a/ HTTP/1.0\r\nHost: 127.0.0.1\r\n\r\n'], server.requests)
        self.assertEqual(43, result.total_bytes)
        self.assertEqual(b'hello', (self.directory / '127.0.0.1' / 'a' / 'index.html').read_bytes())

    def test_non_ascii_path_is_sent_as_utf8(self):
        with OneShotServer(RESPONSE) as server:
            target = RequestTarget.from_url('http://127.0.0.1:{}/€.html'.format(server.port))
            result = self.sut.retrieve(target)

        expected_request = b'GET /\xe2\x82\xac.html HTTP/1.0\r\nHost: 127.0.0.1\r\n\r\n'
        self.assertEqual([expected_request], server.requests)
        self.assertEqual(43, result.total_bytes)
        self.assertEqual(b'hello', (self.directory / '127.0.0.1' / '€.html').read_bytes())
        self.assertIn(b'\nLEN = 43\n', self.output.getvalue())
        self.assertEqual(43, len(expected_request), 'LEN counts bytes, not characters')

    def test_read_failure_closes_connection(self):
        connection = FakeConnection(b'HTTP/1.0 200 OK\r\n\r\npart', ConnectionResetError())
        when(transport).connect('example.test', 80).thenReturn(connection)

        with self.assertRaises(StreamReadError):
            self.sut.retrieve(RequestTarget.from_url('http://example.test/a/b.html'))

        self.assertTrue(connection.closed)
        # No atomic rename, so the partial body stays behind.
        self.assertEqual(b'part', (self.directory / 'example.test' / 'a' / 'b.html').read_bytes())

    def test_unopenable_destination_closes_connection(self):
        (self.directory / 'example.test' / 'a' / 'b.html').mkdir(parents=True)
        connection = FakeConnection(RESPONSE)
        when(transport).connect('example.test', 80).thenReturn(connection)

        with self.assertRaises(LocalIOError):
            self.sut.retrieve(RequestTarget.from_url('http://example.test/a/b.html'))

        self.assertTrue(connection.closed)

    def test_broken_output_is_reported(self):
        when(transport).connect(...).thenRaise(ConnectError('example.test', 80))
        sut = agent.create(Settings(cache_root=self.directory), BrokenPipeOutput())

        with self.assertRaises(LiveOutputError):
            sut.retrieve(RequestTarget.from_url('http://example.test/a/b.html'))

        verify(transport, times=0).connect(...)
