from setuptools import setup, find_packages

setup(
    name="stockpulse",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "fastapi>=0.115.6",
        "uvicorn>=0.34.0",
        "sqlalchemy[asyncio]>=2.0.36",
        "asyncpg>=0.30.0",
        "python-dotenv>=1.0.1",
        "alembic>=1.14.0",
        "pydantic>=2.10.4",
        "pydantic-settings>=2.7.1",
        "strawberry-graphql[fastapi]>=0.256.1,<0.292",
        "graphql-core>=3.2,<3.3",
        "celery[redis]>=5.4.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.3.4",
            "pytest-asyncio>=0.25.0",
        ],
    },
)
