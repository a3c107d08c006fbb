"""
Decay-allocation airdrop: each claim pays a shrinking share of the remaining pool.
"""
