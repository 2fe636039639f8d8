import configparser
import pathlib

from .sitemap import MAX_BYTES_ALLOWED, MAX_URLS


_root = pathlib.Path(__file__).resolve().parent.parent
SECTION = 'sitemap'


def get_path(relpath):
    ''' Get absolute path to a project-relative path. '''
    return _root / relpath


def get_config():
    '''
    Read the sitemap parser configuration from the standard configuration
    files. Settings in ``local.ini`` override those in ``system.ini``.

    :rtype: ConfigParser
    '''
    config_dir = get_path("conf")
    config_files = [
        config_dir / "system.ini",
        config_dir / "local.ini",
    ]
    config = configparser.ConfigParser()
    config.optionxform = str
    config.read(config_files)
    return config


def get_parser_settings(config):
    '''
    Read the ``[sitemap]`` section as keyword arguments for ``SitemapParser``.
    Missing options, or a missing section, get the parser's defaults.

    :param configparser.ConfigParser config:
    :rtype: dict
    :raises ValueError: If an option has a value of the wrong type.
    '''
    if not config.has_section(SECTION):
        return {}
    section = config[SECTION]
    return {
        'strict': section.getboolean('strict', True),
        'allow_partial': section.getboolean('allow_partial', False),
        'max_urls': section.getint('max_urls', MAX_URLS),
        'max_bytes': section.getint('max_bytes', MAX_BYTES_ALLOWED),
    }
