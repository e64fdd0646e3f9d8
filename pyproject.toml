[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dalalstreet"
version = "0.1.0"
description = "Order book, priority queues and matching engine for a stock-trading game, with leaderboards and trade-graph analysis"
requires-python = ">=3.10"
dependencies = []
keywords = ["trading", "order-book", "matching-engine", "stock-market", "game", "leaderboard"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dalalstreet"]

[tool.pytest.ini_options]
addopts = "-ra"
