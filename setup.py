from setuptools import setup, find_packages

setup(
    name="svg2frames",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=[
        "numpy",
        "svgwrite",
        "PyYAML"
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "svg2frames=svg2frames.cli:main",
        ],
    },
    python_requires=">=3.8",
    description="Compile CSS-animated SVGs into static SVG frames",
    author="",
    author_email="",
    url="",
)
