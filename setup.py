#!/usr/bin/env python3
"""
Setup script for the duplex TCP chat client
"""

from setuptools import setup, find_namespace_packages

setup(
    name="duplexchat",
    version="0.1.0",
    description="Console client for line-based TCP chat servers",
    packages=find_namespace_packages(include=["chat_client", "chat_client.*", "shared", "shared.*"]),
    install_requires=[
        "typer>=0.12.3",
        "rich>=13.9.2",
        "aioconsole>=0.8.1",
        "PyYAML>=6.0.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.4.2",
            "pytest-asyncio>=1.2.0",
        ],
    },
    python_requires=">=3.10",
    entry_points={
        'console_scripts': [
            'chat-client=chat_client.cli:main',
        ],
    },
)
