"""Setup script for workdeck package."""

from setuptools import find_packages, setup

setup(
    name="workdeck",
    version="0.1.0",
    description="Terminal dashboard and wait tool for work-dispatch records",
    packages=find_packages(include=["workdeck", "workdeck.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "textual>=0.47.0",
        "rich>=13.0",
        "pyperclip>=1.8",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "workdeck=workdeck.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
