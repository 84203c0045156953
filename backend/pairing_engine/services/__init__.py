"""
Services Layer

Pairing engine business logic:
- Generators (round_robin, elimination_bracket) are pure functions over ranks
- Editor/store helpers accept a Session and a division and commit atomically
- Nothing here depends on HTTP request/response objects
"""
