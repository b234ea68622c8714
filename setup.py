from pathlib import Path

import setuptools

this_directory = Path(__file__).parent
long_description = (this_directory / "README.rst").read_text()

test_dependencies = ["pytest"]


setuptools.setup(
    name="treerings",
    version="0.1.0",
    author="treerings contributors",
    description="Zoomable circle packing views of syntax trees and other hierarchies.",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    packages=["treerings"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Operating System :: Unix",
        "Operating System :: MacOS",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
    keywords="circle packing hierarchy visualization syntax tree ast zoom matplotlib",
    install_requires=[
        "numpy>=1.18",
        "matplotlib>=3.5,<3.10",
        "tqdm",
        "typer",
    ],
    extras_require={"test": test_dependencies},
)
