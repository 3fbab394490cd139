# setup.py
from setuptools import setup, find_packages

setup(
    name="onepiece_api",
    version="0.1.0",
    description="REST API over the One Piece catalog",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"onepiece_api.database": ["schemas/*.sql"]},
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "sqlalchemy>=2.0",
        "pandas",
        "pydantic",
        "fastapi",
        "uvicorn",
        "python-dotenv",
        "keyring",
        "cryptography",
        "pyyaml",
        "PyJWT>=2.0",
    ],
    extras_require={
        "mysql": ["pymysql"],
        "postgresql": ["psycopg2-binary"],
        "test": ["pytest", "httpx"],
    },
    entry_points={
        "console_scripts": [
            "onepiece-api=onepiece_api.web_interface.run_api:run_api",
        ],
    },
)
