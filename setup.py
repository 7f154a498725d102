# setup.py
from setuptools import setup, find_packages

setup(
    name="sourcemap_scout",
    version="0.1.0",
    description="SourceMapScout: проверка source map у JavaScript страницы",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"sourcemap_scout": ["templates/*.j2"]},
    include_package_data=True,
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.2",
        "jinja2>=3.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "sourcemap-scout=sourcemap_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
