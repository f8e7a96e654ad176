"""
Test suite for the Hospital Management System API.

Contains service-level and HTTP-level tests for the application's functionality.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
