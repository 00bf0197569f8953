#!/usr/bin/env python3
"""
MultiSign Python SDK
Multi-party document signing with offline verification
"""

from setuptools import setup, find_packages

# Read the README file for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

requirements = [
    "eth-account>=0.10.0",
    "eth-utils>=2.0.0",
    "jcs>=0.2.1",
    "requests>=2.28.0",
]

test_requirements = [
    "pytest>=7.0.0",
    "pytest-cov>=4.0.0",
]

setup(
    name="multisign-python-sdk",
    version="0.1.0",
    author="MultiSign Team",
    description="Multi-party document signing and offline verification",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Security :: Cryptography",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        "dev": test_requirements,
        "test": test_requirements,
    },
    keywords=[
        "multisign",
        "document-signing",
        "keccak256",
        "secp256k1",
        "verification",
    ],
    entry_points={
        "console_scripts": [
            "multisign=multisign_sdk.cli:main",
        ],
    },
)
