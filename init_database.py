#!/usr/bin/env python3
"""
Initialize the Liquid Law database.

This script creates all database tables without running any recount.
Useful for development and testing.
"""

from app import create_app

if __name__ == '__main__':
    print("Initializing Liquid Law database...")
    app = create_app()
    print("Database initialized successfully!")
    print(f"Database location: {app.config.get('SQLALCHEMY_DATABASE_URI', 'sqlite:///liquid_law.db')}")
