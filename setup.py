from setuptools import setup, find_packages
import pathlib

# Detect layout
use_src = pathlib.Path("src/jsonmapper").exists()
pkg_args = {"package_dir": {"": "src"}, "packages": find_packages(where="src")} if use_src \
           else {"packages": find_packages(where=".")}

setup(
    name="json-mapper",
    version="0.1.0",
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "pydantic>=2",
        "PyYAML",
        "typer",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["jsonmapper=jsonmapper.cli:app"],
    },
    **pkg_args
)
