"""
notify/ -- Outbound email for account verification and password recovery.

Layer rule: notify/ imports only stdlib, third-party libraries, and core/.
auth/ services receive a Mailer instance; notify/ never imports from auth/.
"""
