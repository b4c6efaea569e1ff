from setuptools import setup, find_packages

setup(
    name="cashflow_engine",
    version="0.1.0",
    description="Cash-flow analysis engine: NPV, yield, duration, convexity, z-spread",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "pandas",
        "scipy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.8",
)
