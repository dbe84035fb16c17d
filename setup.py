"""Setup script for the mediasearch-autocomplete package."""

from setuptools import setup, find_packages

setup(
    name="mediasearch-autocomplete",
    version="0.1.0",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.10",
    install_requires=[
        "httpx>=0.25",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "prometheus-client>=0.19",
        "structlog>=23.2",
        "tenacity>=8.2",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "pytest-httpx>=0.28",
        ],
    },
    description="MediaSearch autocomplete - concurrent, cancellable entity lookups for search suggestions",
    author="MediaSearch Team",
)
