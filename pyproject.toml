[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "provisio"
version = "0.1.0"
description = "Provisioning building blocks: run contexts, configuration, templated manifests and manifest providers"
requires-python = ">=3.11"
keywords = ["provisioning", "configuration-management", "dotfiles", "manifests", "templates"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml",
    "jinja2",
    "dnspython",
    "platformdirs",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["provisio"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
