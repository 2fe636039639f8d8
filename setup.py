'''
Sitemapper is a library for reading the URL listings that web sites publish
as sitemaps. This setup.py makes it installable with pip.
'''
from setuptools import setup, find_packages
from pathlib import Path

here = Path(__file__).parent

# Get version
version = {}
with (here / "sitemapper" / "version.py").open() as f:
    exec(f.read(), version)

setup(
    name='sitemapper',
    version=version['__version__'],
    description='Parse XML, text, and gzipped sitemaps into typed documents',
    long_description=(here / "README.md").read_text(),
    long_description_content_type='text/markdown',
    python_requires=">=3.7",
    keywords='sitemap crawler',
    packages=find_packages(exclude=['conf', 'tests']),
    install_requires=[
        'lxml',
        'python-dateutil',
        'python-mimeparse',
        'w3lib',
        'yarl',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': ['sitemapper=sitemapper.__main__:main'],
    },
)
