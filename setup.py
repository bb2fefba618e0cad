# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Setup configuration for the n8n MCP Server
"""

from setuptools import setup, find_packages

setup(
    name="n8n-mcp-server",
    version="1.0.0",
    description="MCP server exposing n8n workflow automation as agent tools",
    author="Jason Cafarelli",
    packages=find_packages(include=["mcp_servers", "mcp_servers.*"]),
    package_data={"mcp_servers.n8n": ["config.yaml"]},
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
        "pydantic>=2.0.0",
        "httpx>=0.25.0",
        "python-dotenv>=1.0.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "n8n-mcp-server=mcp_servers.n8n.n8n_server:main",
        ]
    },
)
