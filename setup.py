from pathlib import Path
from setuptools import setup, find_packages

ROOT = Path(__file__).parent
README = (ROOT / "README.md").read_text(encoding="utf-8")

setup(
    name="mylibrary-emulator",
    version="0.1.0",
    description="Seed, verify and port tooling for the MyLibrary Firebase emulator suite",
    long_description=README,
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=1.10,<3.0.0",
        "packaging",
        "google-cloud-firestore>=2.11.0",  # FieldFilter
        "google-cloud-storage>=2.0.0",
        "google-api-core",
        "firebase-admin>=6.0.0",
        "httpx>=0.24",
    ],
    extras_require={
        "dev": ["black", "ruff", "pytest", "pytest-asyncio"],
    },
    entry_points={
        "console_scripts": [
            "clean-ports=mylibrary_emulator.cli:clean_ports_main",
            "seed-data=mylibrary_emulator.cli:seed_main",
            "seed-with-check=mylibrary_emulator.cli:seed_with_check_main",
            "verify-data=mylibrary_emulator.cli:verify_main",
            "debug-ui=mylibrary_emulator.cli:debug_ui_main",
            "storage-demo=mylibrary_emulator.cli:storage_demo_main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Framework :: AsyncIO",
        "Topic :: Software Development :: Testing",
    ],
    keywords=[
        "firebase",
        "firestore",
        "emulator",
        "seed",
        "pydantic",
    ],
)
