[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "winter"
version = "0.1.0"
description = "A small web framework with a threaded HTTP server, a router, shared components and reflective JSON mapping"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "router", "json", "reflection", "framework"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
winter = "winter.app:main"

[tool.hatch.build.targets.wheel]
packages = ["winter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
