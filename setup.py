from setuptools import setup, find_packages

setup(
    name="mongo-table",
    version="0.1.0",
    description="Schema-driven async table interface over MongoDB collections",
    author="Your Name",
    author_email="your.email@example.com",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    install_requires=[
        "pymongo>=4.9",  # asyncio API (AsyncMongoClient)
        "pandas>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0.0",
            "black>=21.5b2",
            "pylint>=2.8.0",
        ],
    },
    python_requires=">=3.9",
)
