"""Setup script for calpick."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
dev_requirements = []

if requirements_file.exists():
    content = requirements_file.read_text().strip()
    lines = content.split("\n")

    for line in lines:
        line = line.strip()
        # Skip empty lines and comments
        if not line or line.startswith("#"):
            continue

        # Separate development dependencies
        if "pytest" in line:
            dev_requirements.append(line)
        else:
            requirements.append(line)

setup(
    name="calpick",
    version="1.0.0",
    description="Interactive console calendar that prints the chosen date",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="calpick developers",
    # Package configuration
    packages=find_packages(include=["calpick", "calpick.*"]),
    # Dependencies
    install_requires=requirements,
    extras_require={
        "dev": dev_requirements,
    },
    # Python version requirement
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Office/Business :: Scheduling",
        "Topic :: Terminals",
        "Framework :: AsyncIO",
    ],
    keywords="calendar date picker terminal console cli",
    # Entry points
    entry_points={
        "console_scripts": [
            "calpick=calpick.__main__:main",
        ],
    },
    zip_safe=False,
    platforms=["linux", "macos"],
)
