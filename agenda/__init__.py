"""Agenda - medical appointment booking API"""
