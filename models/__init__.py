"""
Models package for the Banker's Algorithm Safety Simulator.
Contains the system state (claim, allocation and need matrices).
"""
