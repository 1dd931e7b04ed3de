#!/usr/bin/env python3

import re
from pathlib import Path

from setuptools import setup


def load_requirements(filepath):
    with filepath.open() as f:
        return [
            line.replace("\\", "").strip()
            for line in f.readlines()
            if line.strip()
            and not line.startswith(("#", "-r"))
            and not line.strip().startswith("--hash")
        ]


requirements = load_requirements(Path("requirements", "chatfolders.in"))
requirements_test = load_requirements(Path("requirements", "test.in"))


module_file = open("chatfolders/__init__.py").read()
metadata = dict(re.findall(r"__([a-z]+)__\s*=\s*\"([^\"]+)\"", module_file))


setup(
    name="chatfolders",
    version="0.1.0",
    description="Share chat folders through invite links.",
    long_description=open("README.rst").read(),
    author=metadata["author"],
    url=metadata["url"],
    license=metadata["license"],
    keywords="chat folders invite links messaging",
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Framework :: Twisted",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Topic :: Communications :: Chat",
        "Topic :: Internet",
    ],
    packages=["chatfolders"],
    package_data={"chatfolders": ["resources/*"]},
    entry_points={"console_scripts": ["chatfolders=chatfolders.cli:main"]},
    install_requires=requirements,
    extras_require={"test": requirements_test},
)
