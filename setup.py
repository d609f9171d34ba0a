from setuptools import setup, find_namespace_packages

setup(
    name="notion_reader",
    version="0.1.0",
    packages=find_namespace_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "notion-client>=2.2.1",
        "python-dotenv>=1.0.0",
        "pydantic>=2.5.2",
        "httpx>=0.23.0",
    ],
    extras_require={
        "test": ["pytest>=7.4.0"],
    },
    entry_points={
        "console_scripts": ["notion-reader=notion_reader.main:main"],
    },
    python_requires=">=3.8",
)
