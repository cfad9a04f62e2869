"""Setup script for the ECHSE ET tools package."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="echse_et",
    version="1.0.0",
    author="ECHSE ET Developers",
    description="Parameter estimation and engine evaluation for the ECHSE evapotranspiration engines",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["echse_et.tests"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.21.0",
        "pandas>=2.2.0",
        "matplotlib>=3.4.0",
        "click>=8.0.0",
        "pyyaml>=6.0",
        "loguru>=0.6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=3.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "echse-et=echse_et.cli.interface:cli",
        ],
    },
    include_package_data=True,
)
