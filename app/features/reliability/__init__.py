"""
Worker reliability feature.

Scores a worker's attendance, punctuality and review quality into a
1.0-5.0 reliability score and keeps the cached score and its history.
"""
