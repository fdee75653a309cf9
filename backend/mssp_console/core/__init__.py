"""Authentication and session-trust services"""
