'''
Decode gzip compressed XML sitemaps.
'''
import gzip
import io
import logging
import re

from .markup import decode_markup
from .sitemap import MAX_URLS


logger = logging.getLogger(__name__)
_GZ_SUFFIX_RE = re.compile(r'\.gz$')


def uncompressed_url(url):
    '''
    Return the URL of the document inside a gzip file, e.g.
    ``/sitemap.xml.gz`` becomes ``/sitemap.xml``.

    :param str url:
    :rtype: str
    '''
    return _GZ_SUFFIX_RE.sub('', str(url), count=1)


def decode_gzip(url, content, strict=True, allow_partial=False,
        max_urls=MAX_URLS):
    '''
    Decompress ``content`` and parse the XML sitemap inside of it.

    Entries are validated against the uncompressed document's URL, so a
    sitemap at ``/a/sitemap.xml.gz`` may list URLs under ``/a/``.

    :param str url: The location of the compressed document.
    :param bytes content: The gzip compressed body.
    :param bool strict: Reject URLs that are not under the base URL.
    :param bool allow_partial: Return partial results for broken XML.
    :param int max_urls: The maximum number of entries to accept.
    :rtype: AbstractSitemap
    :raises ReadError: If the content cannot be decompressed.
    '''
    logger.debug('Processing gzip sitemap %s', url)
    xml_url = uncompressed_url(url)
    logger.debug('XML url = %s', xml_url)

    with gzip.GzipFile(fileobj=io.BytesIO(content), mode='rb') as decompressed:
        return decode_markup(xml_url, decompressed, strict=strict,
            allow_partial=allow_partial, max_urls=max_urls)
