from setuptools import setup, find_packages

setup(
    name="figma-assets-mcp",
    version="1.0.0",
    description="Extract images, vectors, styles and components from Figma nodes over MCP",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    install_requires=[
        "httpx>=0.27.0",
        "pydantic>=2.6.0",
        "mcp>=1.9.0,<2",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.0",
        ],
    },
    python_requires=">=3.10",
    entry_points={
        'console_scripts': [
            'figma-assets-mcp=main:main',
        ],
    },
)
