[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "singtun"
version = "0.1.0"
description = "Userspace TUN stack helpers: TCP NAT table, packet rewriting, checksums, uid ranges, Android package lookups and routing rule planning"
requires-python = ">=3.10"
keywords = ["tun", "vpn", "nat", "checksum", "routing", "policy-routing", "networking"]
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
    "Topic :: System :: Networking",
]
dependencies = [
    "watchdog",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["singtun"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
