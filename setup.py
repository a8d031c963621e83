from setuptools import setup, find_packages
from pathlib import Path

setup(
    name="crop_annotation",
    version=Path("./crop_annotation/VERSION").read_text().strip(),
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    package_data={"crop_annotation": ["VERSION"]},
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "opencv-python-headless",
        "easydict",
        "matplotlib",
        "tqdm",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": ["crop_annotation = crop_annotation.cli:main"],
    },
)
