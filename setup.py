"""Packaging for IntervalAlert.

Install for development:
    pip install -e ".[test]"

Build a macOS .app bundle:
    pip install py2app
    python setup.py py2app
"""

import sys

from setuptools import setup, find_packages

APP = ["main.py"]
DATA_FILES = []
OPTIONS = {
    "argv_emulation": False,
    "iconfile": None,
    "plist": {
        "CFBundleName": "IntervalAlert",
        "CFBundleDisplayName": "IntervalAlert",
        "CFBundleIdentifier": "com.intervalalert.app",
        "CFBundleVersion": "0.1.0",
        "CFBundleShortVersionString": "0.1.0",
        "NSHighResolutionCapable": True,
        "LSMinimumSystemVersion": "13.0",
        "LSUIElement": True,  # menu-bar only, no Dock icon
    },
}

py2app_kwargs = {}
if "py2app" in sys.argv:
    py2app_kwargs = {
        "app": APP,
        "data_files": DATA_FILES,
        "options": {"py2app": OPTIONS},
        "setup_requires": ["py2app"],
    }

setup(
    name="IntervalAlert",
    version="0.1.0",
    description="Countdown timer with escalating interval alerts",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6",
        "SQLAlchemy>=2.0",
        "numpy",
        "typer",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "intervalalert=intervalalert.__main__:main",
        ],
    },
    **py2app_kwargs,
)
