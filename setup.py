"""Setup script for titlecard package."""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="titlecard",
    version="1.0.0",
    description="Find title card frames in video files and rename episodes from their OCR'd titles",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Your Name",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"titlecard": ["models/README.md"]},
    python_requires=">=3.9",
    install_requires=[
        "av>=12.0.0",
        "easyocr>=1.7.0",
        "numpy>=1.21.0",
        "pillow>=9.0.0",
        "rapidfuzz>=2.0.0",
        "rich>=13.0.0",
        "torch>=1.13.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "titlecard=titlecard.__main__:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
