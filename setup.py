from setuptools import setup, find_packages

setup(
    name="live-translate",
    version="0.1.0",
    description="Continuous speech-to-text translation sessions with automatic token renewal",
    author="",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "azure-cognitiveservices-speech>=1.30.0",
        "rich>=12.5.0",
        "pydantic>=2.0.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
        "aiohttp>=3.8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "live-translate=livetranslate.main:main",
        ],
    },
)
