"""
Setup file.

Project metadata and dependencies live in pyproject.toml.
"""

from setuptools import setup

URL = "https://github.com/zackees/jbuild"
KEYWORDS = "java javac compiler build classpath orchestrator"


if __name__ == "__main__":
    setup(
        maintainer="Zachary Vorhies",
        keywords=KEYWORDS,
        url=URL)
