#!/usr/bin/env python
"""
Copyright 2025 Hathor Labs

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

   http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

import re
from pathlib import Path

from setuptools import find_packages, setup

# the package imports its dependencies, read the version without importing it
_version_file = Path(__file__).parent / 'wxf' / 'version.py'
__version__ = re.search(r"^BASE_VERSION = '([^']+)'", _version_file.read_text(), re.MULTILINE).group(1)

install_requires = [
    'colorama',
    'configargparse',
    'numpy',
    'pydantic>=2',
    'PyYAML',
    'structlog',
    'typing_extensions',
]

setup(
    name='wxf-codec',
    version=__version__,
    description='Encoder and decoder for the binary expression exchange format',
    author='WXF Codec Developers',
    license='Apache License 2.0',
    entry_points={
        'console_scripts': ['wxf-cli=wxf_cli.main:main'],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
        'License :: OSI Approved :: Apache Software License',
    ],
    python_requires='>=3.11',
    packages=find_packages(exclude=('wxf_tests', 'wxf_tests.*')),
    package_data={'wxf.conf': ['*.yml']},
    install_requires=install_requires,
    extras_require={
        'test': ['pytest'],
    },
)
