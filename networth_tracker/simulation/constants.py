"""
Simulation Constants

Named defaults for the historical series simulator. Every tuning knob of
the simulator lives here so tests can refer to it by name; settings only
override them per environment.
"""

# Linear congruential generator parameters (Numerical Recipes)
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 2 ** 32

# Trend
ANNUAL_GROWTH_RATE = 0.08
ANNUAL_VOLATILITY = 0.12
DAYS_PER_YEAR = 365

# Perturbations, as fractions of the trend value
SEASONAL_AMPLITUDE = 0.02
ECONOMIC_CYCLE_AMPLITUDE = 0.03
ECONOMIC_CYCLE_FREQUENCY = 3.0

# Monthly-only liability drift and contribution accrual
LIABILITY_DECAY_PER_PERIOD = 0.0005
LIABILITY_JITTER_BAND = 0.01
LIABILITY_JITTER_STD_DEV = 0.005
MONTHLY_CONTRIBUTION_RATE = 0.002

# Values are rounded to cents except for the anchored final point
CURRENCY_PRECISION = 2
