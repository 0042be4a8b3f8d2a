"""auth/ -- Accounts, session tokens, and password recovery for the Flashcards API.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/, study/, or notify/.
api/ imports from auth/, not the other way around.
"""
