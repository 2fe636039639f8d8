class SitemapError(Exception):
    ''' Base class for sitemap decoding failures. '''
    def __init__(self, message, url=None):
        super().__init__(message)
        self.url = url


class UnknownFormatError(SitemapError):
    '''
    The document cannot be decoded as a sitemap.

    Raised directly when a content type does not map to a known sitemap
    format or when a markup document has an unrecognized root element.
    '''
    def __init__(self, message, url=None, content_type=None):
        super().__init__(message, url)
        self.content_type = content_type


class ReadError(UnknownFormatError):
    ''' An I/O or decompression error occurred while reading the document. '''


class MalformedSitemapError(UnknownFormatError):
    ''' The markup is not well formed. '''


class InvalidEntryError(SitemapError):
    '''
    A single entry was rejected: its URL is malformed, or it lies outside of
    the sitemap's base URL in strict mode.

    Decoders catch this, log it, and move on to the next entry.
    '''


class SitemapParserConfigurationError(RuntimeError):
    ''' The XML parser could not be constructed. '''
