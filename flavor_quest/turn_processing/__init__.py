"""Intent validation.

Every player intent flows through the same pipeline before it can touch session state.
"""
