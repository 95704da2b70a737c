#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""
ESC Deployment Test Runner

Runs all tests (unit and mock/integration) or specific test types.

Usage:
    python run_tests.py           # Run all tests
    python run_tests.py --unit    # Run unit tests only
    python run_tests.py --mock    # Run mock/integration tests only
    python run_tests.py -d        # Show installer log output while the tests run
"""
import argparse
import os
import sys
import unittest

# Add the project root to Python path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from escdeploy.installer.utils.logger_utils import InstallerLogger


def _run_directory(title: str, subdirectory: str) -> unittest.TestResult:
    print(f"Running {title}...")
    print("-" * 30)

    loader = unittest.TestLoader()
    suite = loader.discover(start_dir=os.path.join(os.path.dirname(__file__), subdirectory), pattern="test_*.py")
    return unittest.TextTestRunner(verbosity=2).run(suite)


def run_unit_tests():
    """Run unit tests from unit/ subdirectory."""
    return _run_directory("Unit Tests", "unit")


def run_mock_tests():
    """Run mock/integration tests from mock/ subdirectory."""
    return _run_directory("Mock/Integration Tests", "mock")


def main():
    """Main test runner."""
    parser = argparse.ArgumentParser(description="Run ESC deployment tests")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--unit", action="store_true", help="Run unit tests only")
    group.add_argument("--mock", action="store_true", help="Run mock/integration tests only")
    parser.add_argument("--debug", "-d", action="store_true", help="Show installer log output while the tests run")
    args = parser.parse_args()

    # tests assert behavior, not log output
    InstallerLogger.set_console_output(args.debug)
    InstallerLogger.set_debug_enabled(args.debug)

    print("ESC Deployment Test Suite")
    print("=" * 50)

    results = []
    if args.unit:
        results.append(run_unit_tests())
    elif args.mock:
        results.append(run_mock_tests())
    else:
        results.append(run_unit_tests())
        print("\n" + "=" * 50 + "\n")
        results.append(run_mock_tests())

    total_tests = sum(r.testsRun for r in results)
    total_failures = sum(len(r.failures) for r in results)
    total_errors = sum(len(r.errors) for r in results)
    all_successful = all(r.wasSuccessful() for r in results)

    print("\n" + "=" * 50)
    print("OVERALL SUMMARY")
    print("=" * 50)
    print(f"Total tests run: {total_tests}")
    print(f"Total failures: {total_failures}")
    print(f"Total errors: {total_errors}")

    if all_successful:
        print("\nAll tests passed!")
    else:
        print("\nSome tests failed")

    return all_successful


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
