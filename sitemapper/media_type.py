'''
Map content types to the sitemap formats that we know how to decode.

Declared content types are often more specific than the canonical types we
look for (e.g. ``application/rss+xml`` rather than ``application/xml``), so
unknown types are walked up a supertype hierarchy until a known type or the
generic ``application/octet-stream`` is reached.
'''
from enum import Enum
import logging
import mimetypes
import re

from lxml import etree
import mimeparse
import w3lib.encoding


logger = logging.getLogger(__name__)

OCTET_STREAM = 'application/octet-stream'
APPLICATION_XML = 'application/xml'
APPLICATION_ZIP = 'application/zip'
APPLICATION_GZIP = 'application/gzip'
TEXT_PLAIN = 'text/plain'

_GZIP_MAGIC = b'\x1f\x8b'
_SNIFF_LENGTH = 1024
_XML_DECLARATION_RE = re.compile(br'^\s*<\?xml[\s?]')
_SITEMAP_ROOTS = frozenset(['urlset', 'sitemapindex', 'rss', 'feed'])


class MediaFamily(Enum):
    MARKUP = 'markup'
    PLAIN_TEXT = 'plain_text'
    COMPRESSED = 'compressed'
    UNRECOGNIZED = 'unrecognized'


class MediaTypeRegistry:
    ''' A read-only table of media type aliases and supertypes. '''
    def __init__(self, aliases, supertypes):
        '''
        Constructor.

        :param dict aliases: Maps a canonical type to a list of its aliases.
        :param dict supertypes: Maps a type to its explicit supertype. Types
            not listed here fall back to the generic rules in
            ``get_supertype()``.
        '''
        self._aliases = {canonical: frozenset(names)
            for canonical, names in aliases.items()}
        self._supertypes = dict(supertypes)

    def get_aliases(self, media_type):
        ''' :rtype: frozenset[str] '''
        return self._aliases.get(media_type, frozenset())

    def get_supertype(self, media_type):
        '''
        Return the supertype of ``media_type``, or None if it has none.

        :param str media_type: A type string, possibly with parameters.
        :rtype: str
        '''
        try:
            type_, subtype, parameters = mimeparse.parse_mime_type(media_type)
        except ValueError:
            return None

        base_type = '{}/{}'.format(type_, subtype)
        if parameters:
            return base_type
        elif base_type in self._supertypes:
            return self._supertypes[base_type]
        elif subtype.endswith('+xml'):
            return APPLICATION_XML
        elif subtype.endswith('+zip'):
            return APPLICATION_ZIP
        elif type_ == 'text' and base_type != TEXT_PLAIN:
            return TEXT_PLAIN
        elif base_type != OCTET_STREAM:
            return OCTET_STREAM
        return None


REGISTRY = MediaTypeRegistry(
    aliases={
        APPLICATION_XML: ['text/xml', 'application/x-xml'],
        TEXT_PLAIN: [],
        APPLICATION_GZIP: [
            'application/x-gzip',
            'application/x-gunzip',
            'application/gzipped',
            'application/gzip-compressed',
            'application/x-gzip-compressed',
            'gzip/document',
        ],
    },
    supertypes={
        'application/rss+xml': APPLICATION_XML,
        'application/atom+xml': APPLICATION_XML,
        'application/xhtml+xml': APPLICATION_XML,
        TEXT_PLAIN: OCTET_STREAM,
    },
)


def _family_types(canonical):
    return frozenset([canonical]) | REGISTRY.get_aliases(canonical)


XML_MEDIA_TYPES = _family_types(APPLICATION_XML)
TEXT_MEDIA_TYPES = _family_types(TEXT_PLAIN)
GZ_MEDIA_TYPES = _family_types(APPLICATION_GZIP)


def _normalize(media_type):
    '''
    Lower-case a type string and strip whitespace around its parts. Parameters
    are kept: a type with parameters is a subtype of the bare type.
    '''
    parts = [part.strip() for part in media_type.split(';')]
    parts[0] = parts[0].lower()
    return ';'.join(part for part in parts if part)


def classify(content_type):
    '''
    Decide which decoder handles a document with ``content_type``.

    :param str content_type: A declared or detected content type.
    :rtype: MediaFamily
    '''
    if not content_type:
        return MediaFamily.UNRECOGNIZED

    media_type = _normalize(content_type)
    visited = set()

    # Octet-stream is the father of all binary types.
    while media_type is not None and media_type != OCTET_STREAM:
        if media_type in visited:
            logger.warning('Cycle in media type hierarchy at %s', media_type)
            break
        visited.add(media_type)
        if media_type in XML_MEDIA_TYPES:
            return MediaFamily.MARKUP
        elif media_type in TEXT_MEDIA_TYPES:
            return MediaFamily.PLAIN_TEXT
        elif media_type in GZ_MEDIA_TYPES:
            return MediaFamily.COMPRESSED
        media_type = REGISTRY.get_supertype(media_type)

    return MediaFamily.UNRECOGNIZED


class _RootSniffer:
    ''' Parser target that records the local name of the first element. '''
    def __init__(self):
        self.root = None

    def start(self, tag, attrib):
        if self.root is None:
            self.root = etree.QName(tag).localname

    def end(self, tag):
        pass

    def data(self, data):
        pass

    def close(self):
        return self.root


def _sniff_root(sample):
    '''
    Return the local name of the first element in ``sample``, skipping any
    comments, processing instructions and doctype before it. Returns None if
    the sample is not XML.

    :param bytes sample: The start of a document. It may be cut anywhere.
    :rtype: str
    '''
    sniffer = _RootSniffer()
    parser = etree.XMLParser(target=sniffer, encoding='utf-8',
        resolve_entities=False, no_network=True)
    try:
        parser.feed(sample)
        parser.close()
    except etree.LxmlError:
        # Truncated or not XML. The root is set if the parser reached it.
        pass
    return sniffer.root


def detect_content_type(content, filename=None):
    '''
    Guess the content type of a document from its bytes and file name.

    Magic bytes win over the file name, since sitemaps are frequently served
    from URLs that have misleading extensions.

    :param bytes content:
    :param str filename: The last path segment of the document's URL.
    :rtype: str
    '''
    sample = content[:_SNIFF_LENGTH]

    if sample.startswith(_GZIP_MAGIC):
        return APPLICATION_GZIP

    encoding, bom = w3lib.encoding.read_bom(sample)
    if encoding == 'utf-8':
        sample = sample[len(bom):]
    if _XML_DECLARATION_RE.match(sample) or \
            _sniff_root(sample) in _SITEMAP_ROOTS:
        return APPLICATION_XML

    if filename:
        type_, encoding = mimetypes.guess_type(filename, strict=False)
        if encoding == 'gzip':
            return APPLICATION_GZIP
        if type_ is not None:
            return type_

    if b'\x00' in sample:
        return OCTET_STREAM
    return TEXT_PLAIN
