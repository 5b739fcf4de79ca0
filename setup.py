"""
ClockX: a Rubik's Clock style dial puzzle with JAX
"""

import setuptools

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setuptools.setup(
    name="clockx",
    version="0.1.0",
    author="tinker495",
    author_email="wjdrbtjr495@gmail.com",
    description="Rubik's Clock style 3x3 dial puzzle implemented with Jax",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(include=["clockx", "clockx.*"]),
    include_package_data=True,
    install_requires=[
        "jax>=0.4.0",
        "chex>=0.1.0",
        "tabulate>=0.9.0",
        "termcolor>=1.1.0",
        "opencv-python>=4.10.0",
        "tqdm>=4.67.1",
        "numpy>=2.2.0",
        "click>=8.0.0",
        "pillow>=10.0.0",
        "xtructure @ git+https://github.com/tinker495/xtructure.git",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "clockx=clockx.cli:cli",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: Games/Entertainment :: Puzzle Games",
    ],
    python_requires=">=3.10",
)
