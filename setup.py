#!/usr/bin/env python
#

from setuptools import setup

from mdtools import __version__

setup(
    name="mdtools",
    version=__version__,
    description="Index a local Maildir mail store and render folder and message listings",
    long_description=(
        "mdtools walks a tree of Maildir folders and renders compact, "
        "template driven summaries of the folders and the messages in them."
    ),
    packages=["mdtools"],
    python_requires=">=3.11",
    install_requires=[
        "aiofiles",
        "docopt",
        "python-dotenv",
        "python-json-logger",
        "rich",
        "sentry-sdk",
    ],
    extras_require={
        "test": [
            "dirty-equals",
            "Faker",
            "pytest",
            "pytest-asyncio",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "maildir-tools=mdtools.maildir_tools:main",
        ],
    },
)
