"""
Arc Raiders chat gateway service.
"""
