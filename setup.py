#!/usr/bin/env python
from setuptools import setup, find_packages

with open("README.md", "r") as fh:
    long_description = fh.read()

with open("VERSION") as version_file:
    version = version_file.read().strip()

requires = [
    "cerberus",
    "colorama",
    "coloredlogs",
    "click",
    "cryptography",
    "pyyaml",
    "snowflake-connector-python[secure-local-storage]",
    "snowflake-sqlalchemy>=1.5",
    "sqlalchemy",
]

dev_requires = [
    "black",
    "bumpversion",
    "changelog-cli",
    "coverage",
    "flake8",
    "isort",
    "mypy",
    "pre-commit",
    "pytest",
    "pytest-cov",
    "pytest-mock",
    "types-PyYAML",
]

setup(
    name="rolefrost",
    version=version,
    author="Rolefrost Contributors",
    author_email="rolefrost@example.com",
    description="Snowflake database role grants, converged from a spec file",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    include_package_data=True,
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires=requires,
    extras_require={"dev": dev_requires},
    entry_points={"console_scripts": ["rolefrost = rolefrost.cli:main"]},
)
