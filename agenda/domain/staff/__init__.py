"""Staff domain - admin and professional login"""
