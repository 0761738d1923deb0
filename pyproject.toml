[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "merkle_airdrop"
version = "0.0.1"
description = "Merkle-tree token airdrops: build trees from CSV allocations, generate and verify proofs, and model distributor claims with vesting and bonuses."
requires-python = ">=3.10"
dependencies = []
keywords = ["merkle", "airdrop", "proof", "distributor", "vesting", "token"]
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
    "Topic :: Office/Business :: Financial",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["merkle_airdrop"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
