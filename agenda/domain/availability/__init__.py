"""Availability domain - offerable hours per professional and day, free-slot resolution"""
