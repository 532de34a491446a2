"""
Pricing data-quality dashboard package.
"""
