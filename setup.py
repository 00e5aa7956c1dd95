"""
Setup script for eliza-quiz-engine.

Quiz assessment and adaptive remediation engine:

1. Quiz delivery - one question at a time, scored, with a post-quiz summary
2. Remediation - mastery loops for missed questions
3. Practice - open-ended drilling at a chosen difficulty

The 'quiz-engine' command is the terminal entry point; the HTTP API runs
with 'quiz-engine serve' or 'uvicorn main:app'.
"""

from setuptools import find_packages, setup

setup(
    name="eliza-quiz-engine",
    version="0.1.0",
    description="Quiz assessment and adaptive remediation engine",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["quiz_engine", "quiz_engine.*"]),
    py_modules=["config", "main"],
    package_data={"quiz_engine": ["data/*.json"]},
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # API
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
        # Database
        "sqlalchemy>=2.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "quiz-engine=quiz_engine.cli.main:app",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Framework :: FastAPI",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="quiz assessment remediation practice education",
)
