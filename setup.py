#!/usr/bin/env python3
"""
Setup script for the Slack Socket Mode client
"""

from setuptools import setup, find_packages

setup(
    name="socketmode-client",
    version="0.0.1",
    description="Slack Socket Mode envelope client",
    packages=find_packages(include=["shared", "shared.*", "socketmode", "socketmode.*"]),
    install_requires=[
        "websockets==15.0",
        "httpx==0.27.2",
        "typer>=0.15",
        "rich>=13.9.2",
        "PyYAML>=6.0.1",
        "python-dotenv==1.0.1",
    ],
    extras_require={
        "test": [
            "pytest==8.4.2",
            "pytest-asyncio==1.2.0",
        ],
    },
    python_requires=">=3.9",
    entry_points={
        'console_scripts': [
            'socketmode=socketmode.socket_cli:main',
        ],
    },
)
