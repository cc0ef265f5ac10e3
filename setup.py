from setuptools import setup, find_packages

setup(
    name="constenum",
    version="1.0.0",
    description="Generate Enum() accessors listing the constants of Go integer types",
    license="MIT",
    packages=find_packages(include=["constenum", "constenum.*"]),
    install_requires=[
        "pyyaml>=6.0",
        "click>=8.1.7",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
    entry_points={
        "console_scripts": [
            "constenum=constenum.cli:main",
        ],
    },
    python_requires=">=3.8",
)
