"""
Infrastructure adapters: browser, static server, extractors, tool server.
"""
