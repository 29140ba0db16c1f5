from setuptools import setup, find_packages

setup(
    name="solsend",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pydantic",
        "pydantic-settings",
        "structlog",
        "click",
        "cryptography",
        "solana<0.40",
        "solders",
        "base58",
        "httpx",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "solsend=solsend.cli:cli",
        ],
    }
)
