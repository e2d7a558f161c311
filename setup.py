"""
Setup script for kaiseki package.

Kaiseki is a Python binding for the MeCab morphological analyzer with
explicit control over the lifetime of analysis results.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="kaiseki",
    version="0.1.0",
    author="Noyu Ritsuji",
    author_email="",
    description="MeCab morphological analyzer binding with borrowed and cloned results",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/noyuri2z/kaiseki",
    packages=find_packages(exclude=["tests", "tests.*", "web", "web.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Text Processing :: Linguistic",
        "Natural Language :: Japanese",
        "Natural Language :: English",
    ],
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20.0",
    ],
    extras_require={
        "web": [
            "fastapi>=0.108.0",
            "uvicorn>=0.20.0",
            "jinja2>=3.0",
            "python-multipart>=0.0.6",
        ],
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=2.0",
            "httpx>=0.24",
            "fastapi>=0.108.0",
            "jinja2>=3.0",
            "python-multipart>=0.0.6",
            "black>=21.0",
            "flake8>=3.9",
            "mypy>=0.900",
        ],
    },
    keywords=[
        "mecab",
        "morphological analysis",
        "tokenizer",
        "nlp",
        "japanese",
        "ctypes",
    ],
)
