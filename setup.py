from setuptools import setup, find_packages

setup(
    name="chatsync",
    version="0.1.0",
    description="Real-time messaging core - WebSocket channel, event router and query caches",
    author="chatsync Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        # Core dependencies - keep minimal
        "aiohttp>=3.9.0",     # For the WebSocket channel and REST API
        "pyyaml>=6.0",        # For configuration files
        "python-dotenv>=1.0.1"
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",   # For testing
            "pytest-asyncio>=0.23.0",  # For async tests
            "pytest-cov>=4.0.0", # For test coverage
            "black>=23.0.0",   # For code formatting
        ]
    },
)
