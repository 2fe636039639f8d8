import logging

from yarl import URL

from .compressed import decode_gzip
from .config import get_parser_settings
from .errors import UnknownFormatError
from .markup import decode_markup
from .media_type import MediaFamily, classify, detect_content_type
from .sitemap import MAX_BYTES_ALLOWED, MAX_URLS
from .text import decode_text


logger = logging.getLogger(__name__)


class SitemapParser:
    '''
    Parse sitemap documents of any supported format.

    A parser holds no state besides its settings, so one instance can be
    shared by any number of callers.
    '''
    def __init__(self, strict=True, allow_partial=False, max_urls=MAX_URLS,
            max_bytes=MAX_BYTES_ALLOWED):
        '''
        Constructor.

        :param bool strict: If True, URLs that are not under the sitemap's
            base URL are dropped. If False, they are kept but marked as not
            valid. See http://www.sitemaps.org/protocol.html#location
        :param bool allow_partial: If True, XML documents that are not well
            formed produce the entries parsed up to the error instead of
            raising an exception.
        :param int max_urls: The maximum number of entries per document.
        :param int max_bytes: Documents larger than this are still parsed,
            but a warning is logged.
        '''
        self._strict = strict
        self._allow_partial = allow_partial
        self._max_urls = max_urls
        self._max_bytes = max_bytes

    def __repr__(self):
        return '<SitemapParser strict={} allow_partial={}>'.format(
            self._strict, self._allow_partial)

    @classmethod
    def from_config(cls, config):
        '''
        Create a parser from the ``[sitemap]`` section of the configuration.

        :param configparser.ConfigParser config:
        :rtype: SitemapParser
        '''
        return cls(**get_parser_settings(config))

    @property
    def strict(self):
        return self._strict

    @property
    def allow_partial(self):
        return self._allow_partial

    @property
    def max_urls(self):
        return self._max_urls

    @property
    def max_bytes(self):
        return self._max_bytes

    def parse(self, content, url, content_type=None):
        '''
        Parse a sitemap, given its content and its URL.

        If ``content_type`` is not given, it is detected from the content and
        the URL's file name. A declared content type is trusted as is.

        :param bytes content: The raw bytes of the sitemap file.
        :param url: The URL of the sitemap file.
        :type url: str or yarl.URL
        :param str content_type: The MIME type of the content, if known.
        :returns: A Sitemap or SitemapIndex, or None if ``url`` is None.
        :rtype: AbstractSitemap
        :raises UnknownFormatError: If the document cannot be parsed.
        '''
        if url is None:
            return None

        url = str(url)
        if len(content) > self._max_bytes:
            logger.warning('%r Sitemap %s is %d bytes, more than the %d '
                'allowed', self, url, len(content), self._max_bytes)

        if content_type is None:
            filename = URL(url).name
            content_type = detect_content_type(content, filename)
            logger.debug('%r Detected %s for %s', self, content_type, url)

        family = classify(content_type)

        if family is MediaFamily.MARKUP:
            return decode_markup(url, content, strict=self._strict,
                allow_partial=self._allow_partial, max_urls=self._max_urls)
        elif family is MediaFamily.PLAIN_TEXT:
            return decode_text(url, content, strict=self._strict,
                max_urls=self._max_urls)
        elif family is MediaFamily.COMPRESSED:
            return decode_gzip(url, content, strict=self._strict,
                allow_partial=self._allow_partial, max_urls=self._max_urls)

        raise UnknownFormatError("Can't parse a sitemap with the media type "
            "of: {} (at: {})".format(content_type, url), url=url,
            content_type=content_type)

    def reparse(self, content, sitemap, content_type=None):
        '''
        Parse fresh content for a sitemap that is already known, e.g. one that
        was listed in a sitemap index and has since been downloaded.

        The original ``sitemap`` is not modified. Its ``last_modified`` value
        is copied to the new document.

        :param bytes content: The raw bytes of the sitemap file.
        :param AbstractSitemap sitemap: The sitemap that ``content`` belongs
            to.
        :param str content_type: The MIME type of the content, if known.
        :rtype: AbstractSitemap
        '''
        parsed = self.parse(content, sitemap.url, content_type)
        parsed.last_modified = sitemap.last_modified
        return parsed
