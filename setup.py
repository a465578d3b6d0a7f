"""Setup configuration for guildstore."""

from setuptools import setup, find_packages

setup(
    name="guildstore",
    version="0.1.0",
    description="Per-guild settings persistence for a Discord bot",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "aiosqlite>=0.19",
        "PyYAML>=6.0",
        "prompt_toolkit>=3.0",
        "py-cord>=2.4",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
)
