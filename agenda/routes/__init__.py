"""Operational routes outside the booking domains"""
