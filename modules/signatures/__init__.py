"""Signature placement geometry and compositing.

Import the submodules directly; the package itself stays light so that the
sqlmodel tables in :mod:`.repository` are only declared once.
"""
