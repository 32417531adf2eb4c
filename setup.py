from setuptools import setup, find_packages

setup(
    name="pitchroll",
    version="0.1.0",
    description="Real-time pitch detection and note timeline engine",
    author="",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.21.0",
        "scipy>=1.7.0",
        "rich>=12.5.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
    ],
    extras_require={
        "capture": [
            "pyaudio>=0.2.11",
        ],
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pitchroll=pitchroll.main:main",
        ],
    },
)
