"""Domain packages (professionals, availability, bookings, staff)"""
