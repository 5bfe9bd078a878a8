[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rcscript"
version = "0.3.0"
description = "Write scripts for a redstone computer server over a websocket connection"
requires-python = ">=3.10"
keywords = ["minecraft", "redstone", "websocket", "scripting", "asyncio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "websockets",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
    "websockets",
]

[project.scripts]
rcscript-hello = "rcscript.hello:main"

[tool.hatch.build.targets.wheel]
packages = ["rcscript"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
