"""Core session primitives (events and listeners).

Kept free of engine and storage concerns so presentation code can depend on it directly.
"""
