"""Bookings domain - booking store and admission"""
