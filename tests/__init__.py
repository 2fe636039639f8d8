from os.path import dirname
from sys import path


# Add this project to the Python path.
path.append(dirname(dirname(__file__)))


SITEMAP_NS = 'http://www.sitemaps.org/schemas/sitemap/0.9'


def urlset(*urls, namespace=SITEMAP_NS):
    '''
    Make an XML sitemap that lists ``urls``.

    Each item is either a URL string or a dict of child element names to
    text, e.g. ``{'loc': 'http://a.com/', 'priority': '0.8'}``.

    :rtype: bytes
    '''
    return _document('urlset', 'url', urls, namespace)


def sitemapindex(*urls, namespace=SITEMAP_NS):
    ''' Make a sitemap index that lists ``urls``. See ``urlset()``. '''
    return _document('sitemapindex', 'sitemap', urls, namespace)


def _document(root, entry_tag, urls, namespace):
    xmlns = ' xmlns="{}"'.format(namespace) if namespace else ''
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<{}{}>'.format(root, xmlns),
    ]
    for url in urls:
        if isinstance(url, str):
            url = {'loc': url}
        lines.append('  <{}>'.format(entry_tag))
        for name, text in url.items():
            lines.append('    <{0}>{1}</{0}>'.format(name, text))
        lines.append('  </{}>'.format(entry_tag))
    lines.append('</{}>'.format(root))
    return '\n'.join(lines).encode('utf8')
