#!/usr/bin/env python
"""Setup configuration for the JobHub application lifecycle server."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="jobhub-server",
    version="0.1.0",
    author="JobHub",
    description="Flask service for the job application lifecycle: statuses, interviews and feedback",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "Flask>=3.0",
        "Flask-SQLAlchemy>=3.1",
        "SQLAlchemy>=2.0",
        "Flask-Cors>=4.0",
        "Flask-Limiter>=3.5",
        "redis>=5.0",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "python-json-logger>=2.0",
        "PyJWT>=2.8",
        "inngest>=0.4",
        "alembic>=1.13",
        "psycopg2-binary>=2.9",
        "gunicorn>=21.2",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Web Environment",
        "Framework :: Flask",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
