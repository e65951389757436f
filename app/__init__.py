"""KG Orders backend"""
