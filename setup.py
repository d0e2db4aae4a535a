"""
Setup script for package installation
"""
from setuptools import setup, find_packages

setup(
    name="wellness_ledger",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"wellness_ledger": ["data/*.yaml"]},
    python_requires=">=3.10,<3.14",
    install_requires=[
        "fastapi>=0.110",
        "starlette",
        "uvicorn[standard]",
        "pydantic>=2.0",
        "sqlalchemy>=2.0",
        "alembic>=1.13",
        "psycopg2-binary",
        "pyyaml>=6.0",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "httpx",
        ],
    },
)
