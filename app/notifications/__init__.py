"""User notifications"""
