"""Setup configuration for the chrome-devtools-client package.

- Package as "chrome-devtools-client" for pip installation
- Support development mode (pip install -e .)
- Support production installation (pip install .)
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text() if readme_path.exists() else ""


def read_requirements(filename):
    path = Path(__file__).parent / filename
    if not path.exists():
        return []
    return [
        line.strip()
        for line in path.read_text().splitlines()
        if line.strip() and not line.startswith("#")
    ]


setup(
    name="chrome-devtools-client",
    version="0.1.0",
    description="Synchronous Chrome DevTools Protocol client for page automation",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",

    packages=find_packages(include=["chrome_devtools", "chrome_devtools.*"]),

    install_requires=read_requirements("requirements.txt") or ["websockets>=12.0"],
    extras_require={
        "dev": read_requirements("requirements-dev.txt") or ["pytest>=7.4"],
    },

    entry_points={
        "console_scripts": [
            "devtools=chrome_devtools.cli.main:main",
        ],
    },

    python_requires=">=3.10",

    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Software Development :: Testing",
        "Topic :: Internet :: WWW/HTTP :: Browsers",
    ],

    keywords="chrome devtools cdp browser automation websocket",
)
