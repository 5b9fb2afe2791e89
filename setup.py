from setuptools import setup, find_packages

setup(
    name="kindling",
    version="0.1.0",
    description="Kindling - heat tracking, sparks, resurrection and search for a Markdown memory tree",
    packages=find_packages(include=["Kindling", "Kindling.*"]),
    python_requires=">=3.10",
    install_requires=[
        # Numerics
        "numpy>=1.24.0",

        # Schemas / CLI
        "pydantic>=2.0.0",
        "click>=8.0.0",

        # Configuration
        "python-dotenv>=0.19.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "kindling=Kindling.cli.commands:main",
        ],
    },
)
