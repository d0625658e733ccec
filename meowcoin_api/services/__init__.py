"""Metric producers and block statistics"""
