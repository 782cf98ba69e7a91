#!/usr/bin/env python3
from __future__ import annotations

import setuptools
import pathlib
import sys

__minver__ = '3.8'
__author__ = 'The zipview developers'
__slogan__ = 'A zero-copy parser for ZIP archives in memory.'
__topics__ = [
    'Development Status :: 3 - Alpha',
    'Operating System :: OS Independent',
    'Programming Language :: Python :: 3 :: Only',
    'Topic :: System :: Archiving',
    'Topic :: System :: Archiving :: Compression',
    'Topic :: Utilities',
]


def get_config():
    sys.path.insert(0, str(pathlib.Path(__file__).parent.absolute()))

    import zipview

    def get_setup_readme(filename: str | pathlib.Path | None = None):
        if filename is None:
            filename = pathlib.Path(__file__).parent.joinpath('README.md')
        with open(filename, 'r', encoding='UTF8') as README:
            return README.read()

    return dict(
        name=zipview.__distribution__,
        version=zipview.__version__,
        long_description=get_setup_readme(),
        long_description_content_type='text/markdown',
        author=__author__,
        description=__slogan__,
        python_requires=F'>={__minver__}',
        classifiers=__topics__,
        packages=setuptools.find_packages(include=('zipview*',)),
        install_requires=['colorama'],
        entry_points={'console_scripts': ['zipls=zipview.listing:main']},
    )


if __name__ == '__main__':
    setuptools.setup(**get_config())
