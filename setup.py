"""Setup pour SCP Analyzer."""

from setuptools import setup, find_packages

setup(
    name="scp_analyzer",
    version="1.0.0",
    description="Registre de points SCP et suivi des objectifs KPI d'une flotte de conducteurs",
    author="AJ",
    python_requires=">=3.10",
    packages=find_packages(include=["scp_analyzer", "scp_analyzer.*"]),
    entry_points={
        "console_scripts": [
            "scp-analyzer=scp_analyzer.main:main",
        ],
    },
    install_requires=[
        "pydantic>=2.6",
        "python-dateutil>=2.8.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
    },
)
