"""
Core scheduling domain.

Pure logic with no I/O: enumerations, exceptions, time grid math, the
session lifecycle state machine, session candidate expansion and the grid
composer.
"""
