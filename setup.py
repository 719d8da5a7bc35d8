from setuptools import setup, find_packages

setup(
    name="arbor",
    version="0.1.0",
    description="Arbor - A decision tree and random forest implementation",
    author="Arbor Team",
    packages=find_packages(include=["arbor", "arbor.*"]),
    include_package_data=True,
    install_requires=[
        "numpy>=1.17.0",
        "scipy>=1.3.0",
        "pandas>=1.0.0",
        "joblib>=1.0.0",
        "scikit-learn>=1.0.0",
    ],
    extras_require={
        "test": ["pytest>=6.0"],
    },
    python_requires=">=3.7",
    zip_safe=False,
)
