[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tidalrunner"
version = "0.1.6"
description = "Set up and drive SuperCollider, SuperDirt and TidalCycles, with an OSC bridge for live-coding Tidal patterns."
requires-python = ">=3.10"
keywords = ["tidalcycles", "supercollider", "superdirt", "osc", "live-coding", "music"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio",
    "Topic :: Multimedia :: Sound/Audio :: Sound Synthesis",
]
dependencies = [
    "psutil",
    "semver",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
tidalrunner = "tidalrunner.server:main"
tidalrunner-shell = "tidalrunner.shell:main"
tidalrunner-patterns = "tidalrunner.patterns:main"
tidalrunner-dirt-dl = "tidalrunner.dirt_dl:main"
tidalrunner-dirt-play = "tidalrunner.demos:dirt_play_main"
tidalrunner-sc3plugins-eval = "tidalrunner.demos:sc3plugins_eval_main"
tidalrunner-osc-eval = "tidalrunner.demos:osc_eval_main"
tidalrunner-samples = "tidalrunner.samples:main"
tidalrunner-ghci = "tidalrunner.ghci:main"

[tool.hatch.build.targets.wheel]
packages = ["tidalrunner"]

[tool.pytest.ini_options]
addopts = "-ra"
