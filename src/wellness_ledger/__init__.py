"""
Wellness Minutes Ledger

Minutes accounting for a workplace-wellness booking platform: companies buy
plans with a monthly minutes allowance, completed sessions with specialists
consume those minutes at a tier multiplier, and specialists accrue earnings
they can request as payouts.
"""

__version__ = "0.1.0"
