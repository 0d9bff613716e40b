"""
Verification core: enumerations, activity trail, authorization gate and
property verification.
"""
