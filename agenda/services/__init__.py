"""External integrations and outbound side effects"""
