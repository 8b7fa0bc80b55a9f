from setuptools import setup, find_packages

setup(
    name="ppg_heart_rate",
    version="0.1.0",
    description="Camera photoplethysmography heart-rate estimation (finger on lens)",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.24",
        "scipy>=1.10",
        "opencv-python>=4.8",
    ],
    extras_require={
        "dev": ["pytest>=7.4"],
    },
    entry_points={
        "console_scripts": [
            "ppg-monitor=main:main",
        ]
    },
)
