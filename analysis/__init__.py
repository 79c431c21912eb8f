"""
Analysis package for the Banker's Algorithm Safety Simulator.
Contains the event log of request decisions.
"""
