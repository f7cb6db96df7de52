"""
BFS Statistics Gateway - Tools Package

Implementations behind the MCP tools registered in main_server.
"""
