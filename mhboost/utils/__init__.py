"""
Experiment helpers: interface checks, comparisons and plots
"""
