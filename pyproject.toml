[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bounceclassic"
version = "1.0.0"
description = "A small bouncing-ball platformer with a simple 2D graphics and sound toolkit"
requires-python = ">=3.10"
keywords = ["game", "platformer", "bounce", "pygame", "sprites", "collision"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment :: Side-Scrolling/Arcade Games",
]
dependencies = [
    "pygame",
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
bounce-classic = "bounceclassic.classic:main"
bounce-levels = "bounceclassic.levels:main"
bounce-campaign = "bounceclassic.campaign:main"

[tool.hatch.build.targets.wheel]
packages = ["bounceclassic"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
