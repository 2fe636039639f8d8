'''
Decode XML sitemaps, sitemap indexes, and RSS/Atom feeds used as sitemaps.

The document is streamed through an lxml parser whose target is a
``SitemapBuilder``. The builder is a small state machine that keeps track of
the entry under construction and appends finished entries to the document.
'''
from dataclasses import dataclass
from enum import Enum
import io
import logging
import zlib

from lxml import etree

from .errors import (
    InvalidEntryError,
    MalformedSitemapError,
    ReadError,
    SitemapParserConfigurationError,
    UnknownFormatError,
)
from .sitemap import (
    MAX_URLS,
    Sitemap,
    SitemapIndex,
    SitemapType,
    make_entry,
)
from .text import strip_bom


logger = logging.getLogger(__name__)
_CHUNK_SIZE = 64 * 1024


class BuilderState(Enum):
    AWAITING_ROOT = 'awaiting_root'
    IN_LEAF = 'in_leaf'
    IN_INDEX = 'in_index'
    IN_ENTRY = 'in_entry'
    DONE = 'done'


@dataclass(frozen=True)
class _RootFormat:
    ''' How to read entries below a given root element. '''
    type: SitemapType
    entry_tag: str
    # Maps a child element of an entry to a SitemapUrl field.
    fields: dict


_ROOT_FORMATS = {
    'urlset': _RootFormat(SitemapType.XML, 'url', {
        'loc': 'url',
        'lastmod': 'last_modified',
        'changefreq': 'change_frequency',
        'priority': 'priority',
    }),
    'sitemapindex': _RootFormat(SitemapType.INDEX, 'sitemap', {
        'loc': 'url',
        'lastmod': 'last_modified',
    }),
    'rss': _RootFormat(SitemapType.RSS, 'item', {
        'link': 'url',
        'pubDate': 'last_modified',
    }),
    # Atom links are read from the href attribute in _start_field().
    'feed': _RootFormat(SitemapType.ATOM, 'entry', {
        'updated': 'last_modified',
    }),
}


def _local_name(tag):
    ''' Strip the namespace from an lxml tag name. '''
    _, _, local_name = tag.rpartition('}')
    return local_name


class SitemapBuilder:
    '''
    An lxml parser target that builds a sitemap from parse events.

    The root element decides whether the result is a ``Sitemap`` or a
    ``SitemapIndex``. Only direct children of an entry element are read, so
    extension elements such as ``<image:loc>`` do not overwrite entry fields.
    '''
    def __init__(self, url, strict=True, max_urls=MAX_URLS):
        '''
        Constructor.

        :param str url: The location of the document being parsed.
        :param bool strict: Reject URLs that are not under the base URL.
        :param int max_urls: The maximum number of entries to accept.
        '''
        self._url = url
        self._strict = strict
        self._max_urls = max_urls
        self._state = BuilderState.AWAITING_ROOT
        self._format = None
        self._sitemap = None
        self._depth = 0
        self._entry_depth = None
        self._fields = None
        self._field = None
        self._text = list()
        self._limit_logged = False

    def __repr__(self):
        return '<SitemapBuilder url={} state={}>'.format(self._url,
            self._state.name)

    @property
    def sitemap(self):
        '''
        The document built so far, or None if the root element has not been
        seen yet.

        :rtype: AbstractSitemap
        '''
        return self._sitemap

    @property
    def state(self):
        return self._state

    def start(self, tag, attrib):
        self._depth += 1
        name = _local_name(tag)

        if self._state is BuilderState.AWAITING_ROOT:
            self._start_document(name)
        elif self._state is BuilderState.IN_ENTRY:
            if self._depth == self._entry_depth + 1:
                self._start_field(name, attrib)
        elif self._state in (BuilderState.IN_LEAF, BuilderState.IN_INDEX):
            if name == self._format.entry_tag:
                self._state = BuilderState.IN_ENTRY
                self._entry_depth = self._depth
                self._fields = dict()

    def data(self, text):
        if self._field is not None:
            self._text.append(text)

    def end(self, tag):
        if self._state is BuilderState.IN_ENTRY:
            if self._depth == self._entry_depth:
                self._end_entry()
            elif self._depth == self._entry_depth + 1 and \
                    self._field is not None:
                self._fields.setdefault(self._field, ''.join(self._text).strip())
                self._field = None
        elif self._depth == 1:
            self._state = BuilderState.DONE
        self._depth -= 1

    def close(self):
        return self._sitemap

    def _start_document(self, name):
        try:
            self._format = _ROOT_FORMATS[name]
        except KeyError:
            raise UnknownFormatError('Unrecognized root element <{}> in '
                'sitemap {}'.format(name, self._url), url=self._url) from None

        if self._format.type is SitemapType.INDEX:
            self._sitemap = SitemapIndex(self._url, max_urls=self._max_urls)
            self._state = BuilderState.IN_INDEX
        else:
            self._sitemap = Sitemap(self._url, self._format.type,
                max_urls=self._max_urls)
            self._state = BuilderState.IN_LEAF
        logger.debug('%r Found %s document', self, self._format.type.name)

    def _start_field(self, name, attrib):
        if self._format.type is SitemapType.ATOM and name == 'link':
            href = attrib.get('href')
            if href and attrib.get('rel', 'alternate') == 'alternate':
                self._fields.setdefault('url', href.strip())
            return

        field = self._format.fields.get(name)
        if field is not None and field not in self._fields:
            self._field = field
            self._text = list()

    def _end_entry(self):
        fields = self._fields
        self._fields = None
        self._field = None
        self._entry_depth = None
        if self._sitemap.is_index:
            self._state = BuilderState.IN_INDEX
        else:
            self._state = BuilderState.IN_LEAF

        location = fields.pop('url', None)
        if not location:
            logger.debug('%r Skipping entry without a location', self)
            return

        if self._sitemap.is_full:
            if not self._limit_logged:
                logger.warning('%r Reached the limit of %d URLs, ignoring the '
                    'rest of the document', self, self._max_urls)
                self._limit_logged = True
            return

        try:
            entry = make_entry(self._sitemap, location, self._strict, **fields)
        except InvalidEntryError as exc:
            logger.warning('%r %s', self, exc)
            return

        self._sitemap.add_url(entry)
        logger.debug('  %d. %s', len(self._sitemap), entry.url)


def _make_parser(builder):
    '''
    Create a streaming XML parser that sends events to ``builder``.

    The document is always decoded as UTF-8, and external entities are never
    resolved.
    '''
    try:
        return etree.XMLParser(
            target=builder,
            encoding='utf-8',
            resolve_entities=False,
            no_network=True,
        )
    except (etree.LxmlError, LookupError, TypeError) as exc:
        raise SitemapParserConfigurationError(
            'Cannot create an XML parser') from exc


def _read_chunks(url, stream):
    '''
    Yield chunks of ``stream`` with any leading UTF-8 byte order mark removed.

    :raises ReadError: If the stream cannot be read.
    '''
    first = True
    while True:
        try:
            chunk = stream.read(_CHUNK_SIZE)
        except (OSError, EOFError, zlib.error) as exc:
            raise ReadError('Failed to read {}: {}'.format(url, exc),
                url=url) from exc
        if not chunk:
            return
        if first:
            chunk = strip_bom(chunk)
            first = False
        yield chunk


def decode_markup(url, stream, strict=True, allow_partial=False,
        max_urls=MAX_URLS):
    '''
    Parse an XML sitemap, sitemap index, or feed.

    :param str url: The location of the document. Entries are validated
        against the base URL derived from this.
    :param stream: A binary file object, or the document's bytes.
    :param bool strict: Reject URLs that are not under the base URL.
    :param bool allow_partial: If True, a document that is not well formed
        yields whatever entries were parsed before the error instead of
        failing.
    :param int max_urls: The maximum number of entries to accept.
    :rtype: AbstractSitemap
    :raises UnknownFormatError: If the root element is not a known sitemap
        format.
    :raises ReadError: If the stream cannot be read.
    :raises MalformedSitemapError: If the document is not well formed and
        partial results are not allowed.
    '''
    if isinstance(stream, (bytes, bytearray)):
        stream = io.BytesIO(stream)

    builder = SitemapBuilder(url, strict, max_urls)
    parser = _make_parser(builder)

    try:
        for chunk in _read_chunks(url, stream):
            parser.feed(chunk)
        sitemap = parser.close()
    except etree.XMLSyntaxError as exc:
        sitemap = _partial_sitemap(builder, url, allow_partial, exc)

    if sitemap is None:
        raise MalformedSitemapError('No sitemap root element in {}'
            .format(url), url=url)
    sitemap.processed = True
    return sitemap


def _partial_sitemap(builder, url, allow_partial, exc):
    ''' Handle a syntax error according to the partial results policy. '''
    if not allow_partial:
        raise MalformedSitemapError('Failed to parse {}: {}'.format(url, exc),
            url=url) from exc

    sitemap = builder.sitemap
    if sitemap is None:
        raise MalformedSitemapError('Failed to parse {} before finding the '
            'root element: {}'.format(url, exc), url=url) from exc

    logger.warning('Processed broken/partial sitemap for %s: %s', url, exc)
    return sitemap
