from setuptools import setup, find_packages

setup(
    name="showfinder",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy>=2.0",
        "pydantic>=2.0",
        "pydantic-settings",
        "geopy",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    python_requires=">=3.9",
)
