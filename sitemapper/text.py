'''
Decode plain text sitemaps: one URL per line, no metadata.
'''
import io
import logging

import w3lib.encoding

from .errors import InvalidEntryError
from .sitemap import MAX_URLS, Sitemap, SitemapType, make_entry


logger = logging.getLogger(__name__)


def strip_bom(content):
    ''' Remove a UTF-8 byte order mark from the start of ``content``. '''
    encoding, bom = w3lib.encoding.read_bom(content)
    if encoding == 'utf-8':
        return content[len(bom):]
    return content


def decode_text(url, content, strict=True, max_urls=MAX_URLS):
    '''
    Process a text sitemap.

    Blank lines are skipped. Lines that are not valid URLs are logged and
    dropped; they never cause the whole document to fail. Invalid UTF-8 byte
    sequences are replaced rather than raising an error.

    :param str url: The location of the text sitemap.
    :param bytes content: The raw sitemap body.
    :param bool strict: Reject URLs that are not under the sitemap's base URL.
    :param int max_urls: Stop after this many non-blank lines.
    :rtype: Sitemap
    '''
    logger.debug('Processing text sitemap %s', url)
    sitemap = Sitemap(url, SitemapType.TEXT, max_urls=max_urls)
    text = w3lib.encoding.to_unicode(strip_bom(content), 'utf-8')
    count = 0

    # Lines end at \n, \r or \r\n only.
    for line in io.StringIO(text, newline=None):
        line = line.strip()
        if not line:
            continue
        if count >= max_urls:
            logger.warning('%r Reached the limit of %d URLs, ignoring the '
                'rest of the document', sitemap, max_urls)
            break
        count += 1
        try:
            entry = make_entry(sitemap, line, strict)
        except InvalidEntryError as exc:
            logger.warning('%r %s', sitemap, exc)
            continue
        sitemap.add_url(entry)
        logger.debug('  %d. %s', count, entry.url)

    sitemap.processed = True
    return sitemap
