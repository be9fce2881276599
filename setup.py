from setuptools import find_packages, setup

setup(
    name="udpping",
    version="1.0.0",
    platforms=["any"],
    license="MIT",
    packages=find_packages(include=["udpping", "udpping.*"]),
    install_requires=[
        "click==8.1.7",
        "colorama==0.4.6",
        "pydantic==2.11.4",
    ],
    tests_require=[
        "pytest",
    ],
    entry_points={
        "console_scripts": [
            "udpping = udpping.main:cli",
        ],
    },
    python_requires=">=3.11",
    extras_require={
        "test": [
            "pytest",
        ]
    }
)
