"""
Setup script for the trivia-ladder package.

Source layout: the importable package lives in src/trivia_ladder. The
SQLite schema ships as package data next to the storage modules.
"""

from setuptools import setup, find_packages

setup(
    name="trivia-ladder",
    version="1.0.0",
    description="Trivia Ladder - conversational quiz session engine with anti-cheat escalation",
    author="Trivia Ladder Maintainers",
    license="MIT",
    python_requires=">=3.10",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "python-dotenv>=1.0.0",
        "pydantic>=2.5.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "build",
            "wheel",
        ],
    },
    package_data={
        "trivia_ladder._store": ["schema.sql"],
    },
    entry_points={
        "console_scripts": [
            "trivia-ladder=trivia_ladder.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
