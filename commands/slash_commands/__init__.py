"""
Slash command modules, loaded by file at startup
"""
