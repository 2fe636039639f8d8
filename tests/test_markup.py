'''
Tests for XML sitemap parsing.
'''
import codecs
import io
import logging

import pytest

from . import SITEMAP_NS, sitemapindex, urlset
from sitemapper.errors import (
    MalformedSitemapError,
    ReadError,
    UnknownFormatError,
)
from sitemapper.markup import BuilderState, SitemapBuilder, decode_markup
from sitemapper.sitemap import Sitemap, SitemapIndex, SitemapType, SitemapUrl


SITEMAP_URL = 'http://example.com/sitemap.xml'


def test_parse_regular_sitemap():
    ''' Parse a regular sitemap with URL entries. '''
    content = urlset(
        {
            'loc': 'http://example.com/page1',
            'lastmod': '2023-01-01',
            'changefreq': 'weekly',
            'priority': '0.8',
        },
        'http://example.com/page2',
        'http://example.com/page3',
    )
    sitemap = decode_markup(SITEMAP_URL, content)
    assert isinstance(sitemap, Sitemap)
    assert sitemap.type is SitemapType.XML
    assert sitemap.processed
    assert sitemap.urls == [
        SitemapUrl('http://example.com/page1', True, '2023-01-01', 'weekly',
            '0.8'),
        SitemapUrl('http://example.com/page2'),
        SitemapUrl('http://example.com/page3'),
    ]


def test_parse_sitemap_index():
    ''' Parse a sitemap index file with nested sitemap references. '''
    content = sitemapindex(
        {'loc': 'http://example.com/sitemap1.xml', 'lastmod': '2023-01-01'},
        'http://example.com/sitemap2.xml',
    )
    index = decode_markup('http://example.com/sitemap_index.xml', content)
    assert isinstance(index, SitemapIndex)
    assert index.is_index
    assert index.processed
    assert index.sitemaps == [
        SitemapUrl('http://example.com/sitemap1.xml',
            last_modified='2023-01-01'),
        SitemapUrl('http://example.com/sitemap2.xml'),
    ]


def test_index_ignores_leaf_fields():
    ''' Priority and change frequency are meaningless in an index. '''
    content = sitemapindex({
        'loc': 'http://example.com/sitemap1.xml',
        'priority': '0.9',
        'changefreq': 'daily',
    })
    index = decode_markup(SITEMAP_URL, content)
    entry = index.sitemaps[0]
    assert entry.priority is None
    assert entry.change_frequency is None


def test_root_element_decides_document_kind():
    ''' Entries named like leaf entries don't turn an index into a leaf. '''
    content = sitemapindex('http://example.com/page1').replace(
        b'<sitemap>', b'<url>').replace(b'</sitemap>', b'</url>')
    index = decode_markup(SITEMAP_URL, content)
    assert isinstance(index, SitemapIndex)
    assert len(index) == 0


def test_parse_sitemap_no_namespace():
    content = urlset('http://example.com/page1', namespace=None)
    sitemap = decode_markup(SITEMAP_URL, content)
    assert [entry.url for entry in sitemap] == ['http://example.com/page1']


def test_parse_sitemap_prefixed_namespace():
    content = '''<?xml version="1.0" encoding="UTF-8"?>
        <sm:urlset xmlns:sm="{}">
          <sm:url><sm:loc>http://example.com/page1</sm:loc></sm:url>
        </sm:urlset>'''.format(SITEMAP_NS).encode('utf8')
    sitemap = decode_markup(SITEMAP_URL, content)
    assert [entry.url for entry in sitemap] == ['http://example.com/page1']


def test_parse_empty_sitemap():
    sitemap = decode_markup(SITEMAP_URL, urlset())
    assert len(sitemap) == 0
    assert sitemap.processed


def test_parse_sitemap_with_whitespace():
    ''' Whitespace around URLs is removed. '''
    content = urlset('\n    http://example.com/page1   \n')
    sitemap = decode_markup(SITEMAP_URL, content)
    assert sitemap.urls[0].url == 'http://example.com/page1'


def test_extension_elements_do_not_replace_location():
    ''' Only direct children of <url> are read. '''
    content = b'''<?xml version="1.0" encoding="UTF-8"?>
        <urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"
                xmlns:image="http://www.google.com/schemas/sitemap-image/1.1">
          <url>
            <image:image>
              <image:loc>http://example.com/photo.jpg</image:loc>
            </image:image>
            <loc>http://example.com/gallery</loc>
          </url>
        </urlset>'''
    sitemap = decode_markup(SITEMAP_URL, content)
    assert [entry.url for entry in sitemap] == ['http://example.com/gallery']


def test_entry_without_location_is_skipped():
    content = urlset({'lastmod': '2023-01-01'}, 'http://example.com/page1')
    sitemap = decode_markup(SITEMAP_URL, content)
    assert [entry.url for entry in sitemap] == ['http://example.com/page1']


def test_byte_order_mark():
    content = codecs.BOM_UTF8 + urlset('http://example.com/page1')
    sitemap = decode_markup(SITEMAP_URL, content)
    assert len(sitemap) == 1


def test_stream_input():
    stream = io.BytesIO(urlset('http://example.com/page1'))
    sitemap = decode_markup(SITEMAP_URL, stream)
    assert len(sitemap) == 1


def test_strict_drops_urls_outside_base(caplog):
    content = urlset(
        'http://example.com/dir/page1',
        'http://example.com/page2',
        'http://other.example/dir/page3',
    )
    with caplog.at_level(logging.WARNING):
        sitemap = decode_markup('http://example.com/dir/sitemap.xml', content)
    assert [entry.url for entry in sitemap] == ['http://example.com/dir/page1']
    assert 'http://other.example/dir/page3' in caplog.text


def test_lenient_keeps_urls_outside_base():
    content = urlset('http://example.com/dir/page1', 'http://example.com/page2')
    sitemap = decode_markup('http://example.com/dir/sitemap.xml', content,
        strict=False)
    assert [(entry.url, entry.valid) for entry in sitemap] == [
        ('http://example.com/dir/page1', True),
        ('http://example.com/page2', False),
    ]


def test_malformed_url_dropped_in_lenient_mode():
    content = urlset('not a url', 'http://example.com/page1')
    sitemap = decode_markup(SITEMAP_URL, content, strict=False)
    assert [entry.url for entry in sitemap] == ['http://example.com/page1']


def test_url_limit(caplog):
    content = urlset(*['http://example.com/{}'.format(i) for i in range(5)])
    with caplog.at_level(logging.WARNING):
        sitemap = decode_markup(SITEMAP_URL, content, max_urls=3)
    assert [entry.url for entry in sitemap] == [
        'http://example.com/0',
        'http://example.com/1',
        'http://example.com/2',
    ]
    assert sitemap.processed
    assert caplog.text.count('Reached the limit') == 1


def test_unknown_root_element():
    content = b'<html><body><a href="http://example.com/">x</a></body></html>'
    with pytest.raises(UnknownFormatError):
        decode_markup(SITEMAP_URL, content)


TRUNCATED = b'''<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>http://example.com/page1</loc></url>
  <url><loc>http://example.com/page2</loc></url>
  <url><loc>http://example.com/pa'''


def test_truncated_document_fails():
    with pytest.raises(MalformedSitemapError) as exc_info:
        decode_markup(SITEMAP_URL, TRUNCATED)
    assert exc_info.value.url == SITEMAP_URL
    assert exc_info.value.__cause__ is not None


def test_truncated_document_partial(caplog):
    with caplog.at_level(logging.WARNING):
        sitemap = decode_markup(SITEMAP_URL, TRUNCATED, allow_partial=True)
    assert sitemap.processed
    assert [entry.url for entry in sitemap] == [
        'http://example.com/page1',
        'http://example.com/page2',
    ]
    assert 'partial' in caplog.text


def test_mismatched_tags_partial():
    content = b'''<urlset>
        <url><loc>http://example.com/page1</loc></url>
        <url><loc>http://example.com/page2</lc></url>
        <url><loc>http://example.com/page3</loc></url>
    </urlset>'''
    with pytest.raises(MalformedSitemapError):
        decode_markup(SITEMAP_URL, content)
    sitemap = decode_markup(SITEMAP_URL, content, allow_partial=True)
    assert [entry.url for entry in sitemap] == ['http://example.com/page1']


def test_partial_without_root_element():
    ''' A document that breaks before its root element has no kind, so there
    is nothing partial to return. '''
    content = b'<?xml version="1.0" encoding="UTF-8"?>\n<'
    with pytest.raises(MalformedSitemapError):
        decode_markup(SITEMAP_URL, content, allow_partial=True)


def test_empty_document():
    with pytest.raises(MalformedSitemapError):
        decode_markup(SITEMAP_URL, b'', allow_partial=True)


def test_not_xml():
    with pytest.raises(MalformedSitemapError):
        decode_markup(SITEMAP_URL, b'This is not XML')


def test_read_error():
    class BrokenStream:
        def read(self, size=-1):
            raise OSError('connection reset')

    with pytest.raises(ReadError) as exc_info:
        decode_markup(SITEMAP_URL, BrokenStream())
    assert isinstance(exc_info.value.__cause__, OSError)


def test_rss_feed():
    content = b'''<rss version="2.0">
        <channel>
            <title>Test Channel</title>
            <link>http://example.com/</link>
            <item>
                <title>Item 1</title>
                <link>http://example.com/2002/09/29/test1</link>
                <pubDate>Mon, 30 Sep 2002 01:56:02 GMT</pubDate>
            </item>
            <item>
                <link>http://example.com/2002/10/01/test2</link>
            </item>
        </channel>
    </rss>'''
    sitemap = decode_markup('http://example.com/rss', content)
    assert sitemap.type is SitemapType.RSS
    assert sitemap.urls == [
        SitemapUrl('http://example.com/2002/09/29/test1',
            last_modified='Mon, 30 Sep 2002 01:56:02 GMT'),
        SitemapUrl('http://example.com/2002/10/01/test2'),
    ]


def test_atom_feed():
    content = b'''<?xml version="1.0" encoding="utf-8"?>
        <feed xmlns="http://www.w3.org/2005/Atom">
          <title>Test Feed</title>
          <link href="http://example.com/"/>
          <updated>2003-12-13T18:30:02Z</updated>
          <entry>
            <title>Test 1</title>
            <link rel="edit" href="http://example.com/edit/1"/>
            <link href="http://example.com/2003/12/13/test1"/>
            <updated>2003-12-13T18:30:02Z</updated>
          </entry>
        </feed>'''
    sitemap = decode_markup('http://example.com/atom', content)
    assert sitemap.type is SitemapType.ATOM
    assert sitemap.urls == [
        SitemapUrl('http://example.com/2003/12/13/test1',
            last_modified='2003-12-13T18:30:02Z'),
    ]


def test_builder_states():
    builder = SitemapBuilder(SITEMAP_URL)
    assert builder.state is BuilderState.AWAITING_ROOT
    assert builder.sitemap is None

    builder.start('{%s}urlset' % SITEMAP_NS, {})
    assert builder.state is BuilderState.IN_LEAF
    builder.start('{%s}url' % SITEMAP_NS, {})
    assert builder.state is BuilderState.IN_ENTRY
    builder.start('{%s}loc' % SITEMAP_NS, {})
    builder.data('http://example.com/')
    builder.data('page1')
    builder.end('{%s}loc' % SITEMAP_NS)
    builder.end('{%s}url' % SITEMAP_NS)
    assert builder.state is BuilderState.IN_LEAF
    assert [entry.url for entry in builder.sitemap] == [
        'http://example.com/page1'
    ]
    builder.end('{%s}urlset' % SITEMAP_NS)
    assert builder.state is BuilderState.DONE
    assert builder.close() is builder.sitemap


def test_builder_index_state():
    builder = SitemapBuilder(SITEMAP_URL)
    builder.start('sitemapindex', {})
    assert builder.state is BuilderState.IN_INDEX
    builder.start('sitemap', {})
    builder.end('sitemap')
    assert builder.state is BuilderState.IN_INDEX
