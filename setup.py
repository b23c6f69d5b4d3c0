# setup.py
from setuptools import setup, find_packages

setup(
    name="seo_scout",
    version="0.2.0",
    description="Bounded multi-page SEO crawler SEOScout",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"seo_scout": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "lxml>=5.0",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "click>=8.2",
        "Jinja2>=3.1",
        "tldextract>=5.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["seo-scout=seo_scout.cli:cli"],
    },
    python_requires=">=3.11",
)
