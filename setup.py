import codecs
import re
from pathlib import Path

import setuptools


def read(file_path: str) -> str:
    return codecs.open(file_path, "r").read()


def get_version() -> str:
    version_file = read(str(Path("methodfactory", "__init__.py")))
    match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", version_file, re.M)
    if match:
        return match.group(1)
    raise RuntimeError("Cannot find version string")


setuptools.setup(
    name="methodfactory",
    version=get_version(),
    description=(
        "Produce objects by invoking static or instance methods, "
        "with singleton caching"
    ),
    long_description=read("README.md"),
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(
        exclude=("tests", "tests.*", "examples", "examples.*")
    ),
    install_requires=[
        "pydantic>=2",
        "theflow",
        "python-decouple",
        "click",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-mock",
            "pre-commit",
            "black",
            "flake8",
            "coverage",
        ],
    },
    entry_points={"console_scripts": ["mf=methodfactory.cli:main"]},
    python_requires=">=3.10",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    include_package_data=True,
)
