"""
Hospital Management System

A FastAPI-based REST API for managing patients, doctors, departments and
appointments, with patient self-registration and admin administration.
"""

__version__ = "1.0.0"
