"""Performance benchmarks for cgopt.

This package contains benchmarks comparing the evaluation counts and run
times of the conjugate-gradient variants.
"""
