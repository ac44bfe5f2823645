#!/usr/bin/env python3
"""Development tasks for CollectionQL."""

import os
import shutil
import subprocess
import sys


def run_command(command, check=True):
    print(f"Running: {command}")
    result = subprocess.run(command, shell=True, check=check)
    return result.returncode == 0


def clean():
    print("Cleaning build artifacts...")
    for path in ["build", "dist", ".pytest_cache", "htmlcov"]:
        shutil.rmtree(path, ignore_errors=True)
    for name in os.listdir("."):
        if name.endswith(".egg-info"):
            shutil.rmtree(name, ignore_errors=True)
    for root, dirs, _files in os.walk("."):
        if "__pycache__" in dirs:
            shutil.rmtree(os.path.join(root, "__pycache__"), ignore_errors=True)
    print("Clean completed.")


def format_code():
    print("Formatting code...")
    run_command("black collectionql tests examples")
    run_command("isort collectionql tests examples")


def lint():
    print("Running linting...")
    ok = run_command("mypy collectionql", check=False)
    ok = run_command("flake8 collectionql tests examples", check=False) and ok
    if not ok:
        print("Linting failed.")
        sys.exit(1)
    print("Linting passed.")


def test():
    print("Running tests...")
    run_command("pytest tests/ -v --cov=collectionql --cov-report=term")


def print_schema():
    """Print the SDL synthesized for the test models."""
    run_command(f"{sys.executable} -c \"from examples.main import schema; print(schema)\"")


def serve():
    run_command(f"{sys.executable} -m uvicorn examples.main:app --reload")


def build():
    print("Building package...")
    clean()
    run_command(f"{sys.executable} -m build")


def install_dev():
    run_command(f"{sys.executable} -m pip install -e .[dev,test,examples]")


def main():
    commands = {
        "clean": clean,
        "format": format_code,
        "lint": lint,
        "test": test,
        "schema": print_schema,
        "serve": serve,
        "build": build,
        "install-dev": install_dev,
        "all": lambda: (format_code(), lint(), test(), build()),
    }
    if len(sys.argv) < 2 or sys.argv[1] not in commands:
        print("Usage: python dev_tasks.py <command>")
        print("Commands: " + ", ".join(commands))
        sys.exit(1)
    commands[sys.argv[1]]()


if __name__ == "__main__":
    main()
