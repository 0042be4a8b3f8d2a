"""study/ -- Folders and flashcards, scoped to their owning user.

Layer rule: study/ imports only stdlib, third-party libraries, and core/.
"""
