#!/usr/bin/env python3
"""
Setup script for State Validity Package
"""

from setuptools import setup, find_packages

setup(
    name="state_validity",
    version="1.0.0",
    description="Pluggable state validity checking for robot motion planners",
    author="Thorn",
    packages=find_packages(include=["validity", "validity.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.19.0",
        "scipy>=1.5.0",
        "PyYAML>=5.1",
    ],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
