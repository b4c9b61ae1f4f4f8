"""Numeric helpers: iterative engines and Unicode rendering"""
