"""Simulation core (topology, travel-time model, positions, registry, stepper).

The sub-modules are kept free of I/O so they can be unit tested in isolation
and driven by any front-end; only ``visualize`` touches Matplotlib.
"""
