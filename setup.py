from pathlib import Path

from setuptools import find_packages, setup

BASE_DIR = Path(__file__).parent
README = (BASE_DIR / "README.md").read_text(encoding="utf-8")

setup(
    name="system-dashboard-api",
    version="1.0.0",
    description="FastAPI service that feeds host metrics to a dashboard front-end.",
    long_description=README,
    long_description_content_type="text/markdown",
    author="Monitoring Stack",
    packages=find_packages(include=["dashboard_api", "dashboard_api.*"]),
    python_requires=">=3.9",
    include_package_data=True,
    install_requires=[
        "fastapi>=0.115.0",
        "uvicorn[standard]>=0.32.0",
        "psutil>=5.9.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "httpx>=0.27.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "system-dashboard-api=dashboard_api.main:main",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
