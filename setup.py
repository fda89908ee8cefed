import os
from setuptools import setup, find_packages

this_directory = os.path.abspath(os.path.dirname(__file__))
try:
    with open(os.path.join(this_directory, "README.md"), encoding="utf-8") as f:
        long_description = f.read()
except FileNotFoundError:
    long_description = "Rich-text sanitization service and client for the academy platform"

setup(
    name="aulaguard",
    version="0.1.0",
    description="HTML sanitization, document rendering and client SDK for academy rich text",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "beautifulsoup4>=4.12.0",
        "bleach>=6.0.0",
        "fastapi>=0.110.0",
        "html5lib>=1.1",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "PyYAML>=6.0",
        "requests>=2.31.0",
    ],
    extras_require={
        "test": [
            "httpx>=0.27.0",
            "pytest>=7.0",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Security",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.8",
)
