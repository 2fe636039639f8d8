'''
URL handling for sitemap entries.

A sitemap may only list URLs at or below its own location, so every entry is
compared against the sitemap's base URL. See
http://www.sitemaps.org/protocol.html#location
'''
import logging

from yarl import URL

from .errors import InvalidEntryError


logger = logging.getLogger(__name__)
_ALLOWED_SCHEMES = ('http', 'https')


def url_is_valid(base_url, test_url):
    '''
    Return True if ``test_url`` is under ``base_url``.

    This is a plain, case-sensitive prefix comparison with no normalization.

    :param str base_url: The sitemap's base URL.
    :param str test_url: The URL to check.
    :rtype: bool
    '''
    if not base_url or test_url is None:
        return False
    # Don't try a comparison if the URL is too short to match.
    if len(base_url) > len(test_url):
        return False
    return test_url[:len(base_url)] == base_url


def base_url_of(url):
    '''
    Return the directory that a sitemap at ``url`` lives in, i.e. everything up
    to and including the last slash of the path.

    :param str url:
    :rtype: str
    '''
    parsed = URL(url)
    path = parsed.raw_path or '/'
    base_path = path[:path.rfind('/') + 1] or '/'
    return str(parsed.with_path(base_path, encoded=True))


def parse_url(text):
    '''
    Parse the URL string of a sitemap entry.

    The URL is only checked, never rewritten: dot segments and escapes are
    returned exactly as the document wrote them.

    :param str text:
    :returns: ``text`` without surrounding whitespace.
    :rtype: str
    :raises InvalidEntryError: If ``text`` is not an absolute HTTP(S) URL.
    '''
    stripped = text.strip()
    try:
        url = URL(stripped)
        host = url.host
    except (TypeError, ValueError) as exc:
        raise InvalidEntryError('Bad URL: [{}]'.format(text),
            url=text) from exc

    if not url.is_absolute() or url.scheme not in _ALLOWED_SCHEMES \
            or not host:
        raise InvalidEntryError('Bad URL: [{}]'.format(text), url=text)

    return stripped
