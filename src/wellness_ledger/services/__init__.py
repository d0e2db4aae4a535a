"""
Business services for minutes accounting, earnings and payouts
"""
