#!/usr/bin/env python3
"""
Setup configuration for LyricSync
Follow time-tagged song lyrics along a live playback clock
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "click>=8.1.7",
    "pyyaml>=6.0.1",
    "requests>=2.31.0",
    "colorama>=0.4.6",
    "python-dotenv>=1.0.0",
]

test_requirements = [
    "pytest>=7.4.3",
    "pytest-asyncio>=0.21.1",
]

setup(
    name="lyricsync",
    version="0.4.0",
    author="LyricSync Team",
    description="Follow time-tagged song lyrics along a live playback clock, with LRCLIB lookup",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["lyricsync", "lyricsync.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
    ],
    python_requires=">=3.10",
    install_requires=core_requirements,
    extras_require={
        "test": test_requirements,
        "dev": test_requirements + [
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lyricsync=lyricsync.main:cli",
        ],
    },
    keywords="lyrics lrc synchronized karaoke lrclib cli",
)
