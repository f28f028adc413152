import tomllib
from setuptools import setup, find_packages

# Safely read the long description from README.md, if present
try:
    with open("README.md", encoding="utf-8") as f:
        long_description = f.read()
except FileNotFoundError:
    long_description = ""

# Version lives in pyproject.toml so release bumps need only modify that file
with open("pyproject.toml", "rb") as fp:
    VERSION = tomllib.load(fp)["tool"]["orthanc-cli"]["version"]

setup(
    name="orthanc-cli",
    version=VERSION,
    description="Command-line client for the Orthanc PACS REST API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["orthanc_cli", "orthanc_cli.*"]),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.2",
        "ruamel.yaml>=0.17.21",
        "tableprint>=0.9.0",
        "requests>=2.25",
        "pydantic>=2.0",
        "google-auth>=2.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "orthanc = orthanc_cli.cli:cli",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
