'''
Sitemap documents and their entries.

A decoder creates one document, fills it in during a single decode call and
then hands it to the caller. Nothing else writes to a document.
'''
from dataclasses import dataclass
from enum import Enum
import logging

import dateutil.parser

from .errors import InvalidEntryError
from .urls import base_url_of, parse_url, url_is_valid


logger = logging.getLogger(__name__)

# The sitemap protocol allows at most 50,000 URLs per document.
MAX_URLS = 50000

# Sitemap documents must be limited to 10MB (10,485,760 bytes).
MAX_BYTES_ALLOWED = 10485760

DEFAULT_PRIORITY = 0.5


class SitemapType(Enum):
    ''' The concrete format that a document was decoded from. '''
    XML = 'xml'
    TEXT = 'text'
    INDEX = 'index'
    RSS = 'rss'
    ATOM = 'atom'


class ChangeFrequency(Enum):
    ALWAYS = 'always'
    HOURLY = 'hourly'
    DAILY = 'daily'
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'
    YEARLY = 'yearly'
    NEVER = 'never'


@dataclass(frozen=True)
class SitemapUrl:
    '''
    One entry in a sitemap.

    In a sitemap index, an entry references another sitemap and only ``url``
    and ``last_modified`` are meaningful.

    The metadata fields hold the raw text from the document. The ``*_value``
    and ``*_date`` properties interpret that text.
    '''
    url: str
    valid: bool = True
    last_modified: str = None
    change_frequency: str = None
    priority: str = None

    @property
    def last_modified_date(self):
        '''
        The last modified timestamp, or None if absent or unparseable.

        :rtype: datetime.datetime
        '''
        if not self.last_modified:
            return None
        try:
            return dateutil.parser.parse(self.last_modified)
        except (ValueError, OverflowError):
            logger.debug('Unparseable lastmod %r for %s', self.last_modified,
                self.url)
            return None

    @property
    def priority_value(self):
        '''
        The priority as a float in the range [0, 1]. Missing or invalid
        priorities fall back to 0.5.

        :rtype: float
        '''
        if self.priority is None:
            return DEFAULT_PRIORITY
        try:
            priority = float(self.priority)
        except ValueError:
            return DEFAULT_PRIORITY
        if not 0.0 <= priority <= 1.0:
            return DEFAULT_PRIORITY
        return priority

    @property
    def change_frequency_value(self):
        ''' :rtype: ChangeFrequency or None '''
        if not self.change_frequency:
            return None
        try:
            return ChangeFrequency(self.change_frequency.strip().lower())
        except ValueError:
            return None


class AbstractSitemap:
    ''' Attributes shared by leaf sitemaps and sitemap indexes. '''
    def __init__(self, url, type_, max_urls=MAX_URLS):
        '''
        Constructor.

        :param str url: The location of this document.
        :param SitemapType type_: The format of this document.
        :param int max_urls: Entries beyond this many are not added.
        '''
        self._url = str(url)
        self._base_url = base_url_of(self._url)
        self._type = type_
        self._max_urls = max_urls
        self._entries = list()
        self.last_modified = None
        self.processed = False

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __repr__(self):
        return '<{} url={} entries={}>'.format(self.__class__.__name__,
            self._url, len(self._entries))

    @property
    def url(self):
        return self._url

    @property
    def base_url(self):
        '''
        Entries are valid only if they start with this prefix.

        :rtype: str
        '''
        return self._base_url

    @property
    def type(self):
        return self._type

    @property
    def max_urls(self):
        return self._max_urls

    @property
    def is_index(self):
        return False

    @property
    def is_full(self):
        return len(self._entries) >= self._max_urls

    def add_url(self, entry):
        '''
        Append an entry unless this document is already full.

        :param SitemapUrl entry:
        :returns: True if the entry was added.
        :rtype: bool
        '''
        if self.is_full:
            return False
        self._entries.append(entry)
        return True


class Sitemap(AbstractSitemap):
    ''' A leaf sitemap: a list of page URLs. '''
    def __init__(self, url, type_=SitemapType.XML, max_urls=MAX_URLS):
        super().__init__(url, type_, max_urls)

    @property
    def urls(self):
        ''' :rtype: list[SitemapUrl] '''
        return list(self._entries)


class SitemapIndex(AbstractSitemap):
    ''' A sitemap index: a list of references to other sitemaps. '''
    def __init__(self, url, max_urls=MAX_URLS):
        super().__init__(url, SitemapType.INDEX, max_urls)

    @property
    def is_index(self):
        return True

    @property
    def sitemaps(self):
        ''' :rtype: list[SitemapUrl] '''
        return list(self._entries)

    def add_url(self, entry):
        if entry.priority is not None or entry.change_frequency is not None:
            raise ValueError('Sitemap index entries cannot have a priority or '
                'change frequency: {}'.format(entry.url))
        return super().add_url(entry)


def make_entry(sitemap, text, strict=True, last_modified=None,
        change_frequency=None, priority=None):
    '''
    Build an entry for ``sitemap`` from a URL string found in its content.

    Every decoder sends its URLs through here so that the base URL check is
    applied the same way to each format.

    :param AbstractSitemap sitemap: The document the entry will belong to.
    :param str text: The URL as it appears in the document.
    :param bool strict: If True, URLs outside of the sitemap's base URL are
        rejected. If False they are kept and flagged with ``valid=False``.
    :rtype: SitemapUrl
    :raises InvalidEntryError: If the URL is malformed, or if it is outside
        of the base URL in strict mode.
    '''
    url = parse_url(text)
    valid = url_is_valid(sitemap.base_url, url)
    if not valid and strict:
        raise InvalidEntryError('URL {} is excluded from the sitemap as it is '
            'not under the base URL {}'.format(url, sitemap.base_url),
            url=url)
    return SitemapUrl(url, valid, last_modified, change_frequency, priority)
