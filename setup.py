#!/usr/bin/env python
# -*- encoding: utf-8 -*-

"""Setup Module for RestFrame, the resource API toolkit for Flask"""

import io

from os.path import dirname, join

from setuptools import find_packages, setup


def read(*names, **kwargs):
    """Helper method to read files"""
    return io.open(
        join(dirname(__file__), *names),
        encoding=kwargs.get("encoding", "utf8"),
    ).read()


flask_requires = ["flask>=2.3.0", "werkzeug>=2.3.0"]
marshmallow_requires = ["marshmallow>=3.15.0"]

install_requires = (
    flask_requires
    + marshmallow_requires
    + [
        "bleach>=4.1.0",
        "inflection>=0.5.1",
        "python-dateutil>=2.8.2",
    ]
)

testing_requires = [
    "pytest-cov>=4.1.0",
    "pytest-mock>=3.12.0",
    "pytest>=7.4.3",
]

types_requires = [
    "types-bleach>=6.0.0",
    "types-python-dateutil>=0.1.6",
]

dev_requires = (
    types_requires
    + testing_requires
    + [
        "black>=23.11.0",
        "coverage>=7.3.2",
        "isort>=5.12.0",
        "nox>=2023.4.22",
    ]
)

setup(
    name="restframe",
    version="0.1.0",
    license="BSD 3-Clause License",
    description="Resource APIs for Flask, with serializers, viewsets and routers",
    long_description=read("README.rst"),
    packages=find_packages("src"),
    package_dir={"": "src"},
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.9",
    classifiers=[
        # complete classifier list: http://pypi.python.org/pypi?%3Aaction=list_classifiers
        "Development Status :: 2 - Pre-Alpha",
        "Framework :: Flask",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3 :: Only",
        "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
        "Topic :: Software Development :: Libraries :: Application Frameworks",
    ],
    keywords=["rest", "api", "flask", "marshmallow", "serializers", "viewsets"],
    install_requires=install_requires,
    extras_require={
        "test": testing_requires,
        "tests": testing_requires,
        "testing": testing_requires,
        "dev": dev_requires,
        "all": dev_requires,
    },
)
