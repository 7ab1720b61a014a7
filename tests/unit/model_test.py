from ddt import ddt, data, unpack
from pathlib import Path
from unittest import TestCase

from cproxy.errors import UsageError
from cproxy.model import DirectoryResult, RequestTarget


@ddt
class TestRequestTarget(TestCase):
    @data(
        ('http://example.test', RequestTarget('example.test', '/', 80)),
        ('http://example.test/', RequestTarget('example.test', '/', 80)),
        ('http://example.test/a/b.html', RequestTarget('example.test', '/a/b.html', 80)),
        ('http://example.test:8080/a/', RequestTarget('example.test', '/a/', 8080)),
        ('http://example.test:8080', RequestTarget('example.test', '/', 8080)),
        ('http://example.test/search?q=a/b', RequestTarget('example.test', '/search?q=a/b', 80)),
    )
    @unpack
    def test_from_url(self, url, expected):
        self.assertEqual(expected, RequestTarget.from_url(url))

    @data(
        'example.test/a',
        'https://example.test/',
        'ftp://example.test/',
        'http://',
        'http:///a',
        'http://example.test:http/',
        'http://example.test:0/',
        'http://example.test:70000/',
    )
    def test_from_url_rejects(self, url):
        with self.assertRaises(UsageError):
            RequestTarget.from_url(url)


class TestDirectoryResult(TestCase):
    def test_ok(self):
        self.assertTrue(DirectoryResult().ok)

    def test_failed(self):
        result = DirectoryResult(failed_at=Path('x'), error=NotADirectoryError())
        self.assertFalse(result.ok)
