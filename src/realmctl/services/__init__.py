"""Service layer — queries, commands, and browsing returning ServiceResult.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
