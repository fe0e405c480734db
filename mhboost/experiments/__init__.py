"""
AdaBoost.MH experiment scripts
"""
