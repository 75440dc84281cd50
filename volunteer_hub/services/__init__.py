"""
Service layer: store adapter, engagement operations and the chat feed.
"""
