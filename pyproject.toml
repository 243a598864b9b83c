[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gleserve"
version = "0.1.0"
description = "A small threaded HTTP server that serves static files and search-result pages"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "search", "static-files", "threadpool"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gleserve"]

[tool.pytest.ini_options]
addopts = "-ra"
