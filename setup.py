#!/usr/bin/env python3
"""
Setup script for Tessera.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="tessera-sessions",
    version="0.1.0",
    description="Signed, encoded cookie sessions with flash values and pluggable stores",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Tessera Contributors",
    packages=find_packages(include=["tessera", "tessera.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Internet :: WWW/HTTP :: Session",
    ],
    keywords="session cookie hmac signing flash asgi",
)
