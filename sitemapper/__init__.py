'''
Extract URL listings from XML, text, and gzip compressed sitemaps.
'''
from .errors import (
    InvalidEntryError,
    MalformedSitemapError,
    ReadError,
    SitemapError,
    SitemapParserConfigurationError,
    UnknownFormatError,
)
from .parser import SitemapParser
from .sitemap import (
    MAX_BYTES_ALLOWED,
    MAX_URLS,
    AbstractSitemap,
    ChangeFrequency,
    Sitemap,
    SitemapIndex,
    SitemapType,
    SitemapUrl,
)
from .urls import url_is_valid
from .version import __version__


VERSION = __version__
