# setup.py
from setuptools import setup, find_packages

setup(
    name="rc6_constants",
    version="0.1.0",
    description="Search and vet 32-bit prime mixing constants for RC6-style ciphers",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "sympy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "rc6-constants = rc6_constants.cli:main",
        ],
    },
)
