"""Domain layer for tripledger application.

Services live in their own modules (``tripledger.domain.splits`` and so on)
and are imported from there; this package stays import-free so the database
layer can import ``tripledger.domain.entities`` without cycles.
"""
