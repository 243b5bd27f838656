from setuptools import setup, find_packages

setup(
    name="calcjit",
    version="0.1.0",
    description="calcjit — JIT compiler for arithmetic expressions",
    packages=find_packages(include=["calcjit", "calcjit.*"]),
    python_requires=">=3.10",
    install_requires=[
        "llvmlite>=0.41.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "hypothesis>=6.0",
        ],
    },
)
