[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "enoch"
version = "0.1.0"
description = "One-time pad management: generate, encrypt, decrypt, assess randomness and build deniable pads"
requires-python = ">=3.10"
dependencies = []
keywords = ["one-time pad", "otp", "encryption", "entropy", "randomness", "plausible deniability"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
er = "enoch.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["enoch"]

[tool.pytest.ini_options]
addopts = "-ra"
