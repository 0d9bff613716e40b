"""
Domain services orchestrating repositories and the verification core.
"""
