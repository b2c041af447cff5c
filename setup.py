#!/usr/bin/env python

from setuptools import setup  # type: ignore[import]

setup(
    name="adler32cmp",
    version="1.0.0",
    description="adler32-cmp compares the Adler-32 checksum of files with the one stored by StoRM in their extended attributes.",
    packages=["adler32cmp"],
    python_requires=">=3.9",
    install_requires=[
        "wipac-dev-tools",
    ],
    extras_require={
        "tests": [
            "pytest",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "adler32-cmp=adler32cmp.adler32_cmd:main",
        ],
    },
    classifiers=[
        "Operating System :: POSIX :: Linux",
        "Topic :: System :: Archiving",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: Implementation :: CPython",
    ],
    zip_safe=False,
)
