"""Payment gateway integrations"""
