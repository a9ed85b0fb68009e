[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "markitup"
version = "0.1.0"
description = "Convert Office documents, spreadsheets, web pages and images into Markdown"
requires-python = ">=3.11"
dependencies = [
    "requests",
]
keywords = [
    "markdown",
    "converter",
    "docx",
    "pptx",
    "xlsx",
    "csv",
    "html",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Markup :: Markdown",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
markitup = "markitup.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["markitup"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"
