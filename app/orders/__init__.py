"""Order lifecycle: catalog lookups, persistence and state machine"""
