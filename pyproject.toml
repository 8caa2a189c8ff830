[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "trimeshlab"
version = "0.1.0"
description = "Half-edge triangle meshes, Loop subdivision, sphere refinement and discrete electrostatics on surfaces"
requires-python = ">=3.10"
keywords = ["mesh", "half-edge", "subdivision", "loop", "geometry processing", "laplacian", "poisson"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
trimeshlab = "trimeshlab.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["trimeshlab"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
