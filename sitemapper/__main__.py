import argparse
import logging
import pathlib
import sys

from .config import get_config
from .errors import SitemapError
from .parser import SitemapParser


logger = logging.getLogger('sitemapper')


def configure_logging(log_level, error_log):
    ''' Set default format and output stream for logging. '''
    log_format = '%(asctime)s [%(name)s] %(levelname)s: %(message)s'
    log_date_format = '%Y-%m-%d %H:%M:%S'
    log_formatter = logging.Formatter(log_format, log_date_format)
    log_level = getattr(logging, log_level.upper())
    log_handler = logging.StreamHandler(sys.stderr)
    log_handler.setFormatter(log_formatter)
    log_handler.setLevel(log_level)
    logger = logging.getLogger()
    logger.addHandler(log_handler)
    logger.setLevel(log_level)

    if error_log is not None:
        exc_handler = logging.FileHandler(error_log)
        exc_handler.setFormatter(log_formatter)
        exc_handler.setLevel(logging.ERROR)
        logger.addHandler(exc_handler)


def get_args(argv=None):
    ''' Parse command line arguments. '''
    arg_parser = argparse.ArgumentParser(
        prog='sitemapper',
        description='Print the URLs listed in a sitemap file.'
    )
    arg_parser.add_argument(
        'path',
        type=pathlib.Path,
        help='The sitemap file to parse.'
    )
    arg_parser.add_argument(
        '--url',
        required=True,
        help='The URL the sitemap was downloaded from. Entries are validated '
             'against it.'
    )
    arg_parser.add_argument(
        '--content-type',
        help='The MIME type of the file (default: detect it)'
    )
    arg_parser.add_argument(
        '--lenient',
        action='store_true',
        help='Keep URLs that are not under the sitemap URL, marking them as '
             'invalid.'
    )
    arg_parser.add_argument(
        '--allow-partial',
        action='store_true',
        help='Print the entries of a broken XML sitemap up to the error.'
    )
    arg_parser.add_argument(
        '--log-level',
        default='warning',
        metavar='LEVEL',
        choices=['debug', 'info', 'warning', 'error', 'critical'],
        help='Set logging verbosity (default: warning)'
    )
    arg_parser.add_argument(
        '--error-log',
        help='Copy error logs to the specified file.'
    )
    return arg_parser.parse_args(argv)


def format_entry(entry):
    '''
    Format one sitemap entry as a line of tab separated values. Entries that
    are not under the sitemap's base URL start with ``!``.

    :param sitemapper.sitemap.SitemapUrl entry:
    :rtype: str
    '''
    fields = [entry.url if entry.valid else '!' + entry.url]
    for value in (entry.last_modified, entry.change_frequency, entry.priority):
        fields.append(value or '')
    return '\t'.join(fields).rstrip('\t')


def main(argv=None):
    ''' Parse a sitemap file and print its entries. '''
    args = get_args(argv)
    configure_logging(args.log_level, args.error_log)
    config = get_config()
    defaults = SitemapParser.from_config(config)
    parser = SitemapParser(
        strict=defaults.strict and not args.lenient,
        allow_partial=defaults.allow_partial or args.allow_partial,
        max_urls=defaults.max_urls,
        max_bytes=defaults.max_bytes,
    )

    content = args.path.read_bytes()

    try:
        sitemap = parser.parse(content, args.url, args.content_type)
    except SitemapError as exc:
        logger.error('%s', exc)
        return 1

    logger.info('Parsed %r (%s)', sitemap, sitemap.type.name)
    for entry in sitemap:
        print(format_entry(entry))
    return 0


if __name__ == '__main__':
    sys.exit(main())
