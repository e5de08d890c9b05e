"""
Member registry and profile editor (scoped listing, CSV export, role/scope changes).
"""
