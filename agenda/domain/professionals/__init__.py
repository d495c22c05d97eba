"""Professionals domain - admin-managed practitioners"""
