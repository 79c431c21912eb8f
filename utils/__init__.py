"""
Utilities package for the Banker's Algorithm Safety Simulator.
Contains the state file loader and the simulation logger.
"""
