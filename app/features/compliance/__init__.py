"""
PP 35/2021 compliance feature.

Tracks how many days a daily worker has worked for one business in a
calendar month and gates booking acceptance at the 21-day statutory limit.
"""
