from setuptools import setup, find_packages

setup(
    name="ZIHurdle",
    version="0.1.0",
    packages=find_packages(include=["zihurdle", "zihurdle.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.21",
        "pandas>=1.5",
        "matplotlib",
        "scipy>=1.8",
        "statsmodels>=0.14",
    ],
    extras_require={
        "progress": ["tqdm"],
        "test": ["pytest"],
    },
    description="Zero-inflated and hurdle count models by simulation",
)
