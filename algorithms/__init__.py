"""
Algorithms package for the Banker's Algorithm Safety Simulator.
Contains the safety check and the request decision driver.
"""
